from __future__ import annotations

"""
Retention Sweeper.

Removes compressed archives (``<path>.*.gz``) whose modification time falls
before the retention cutoff. Safe to run repeatedly; a failure on one file
never stops the sweep of the others.
"""

import glob
import logging
import os
import time
from datetime import timedelta
from typing import List, Optional

from chronolog.domain.constants import COMPRESSED_SUFFIX

logger = logging.getLogger(__name__)


def archive_pattern(file_path: str) -> str:
    """Glob pattern matching every compressed archive of ``file_path``."""
    return glob.escape(file_path) + ".*" + COMPRESSED_SUFFIX


def sweep(file_path: str, max_age: timedelta, now: Optional[float] = None) -> List[str]:
    """
    Delete compressed archives strictly older than ``now - max_age``.

    Args:
        file_path: Active log file path the archives derive from.
        max_age: Retention window.
        now: Reference epoch seconds; defaults to the current time.

    Returns:
        List[str]: Paths that were removed.
    """
    reference = time.time() if now is None else now
    cutoff = reference - max_age.total_seconds()
    removed: List[str] = []

    for path in sorted(glob.glob(archive_pattern(file_path))):
        try:
            mtime = os.stat(path).st_mtime
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.error(f"failed to stat archive '{path}': {e}")
            continue

        if mtime >= cutoff:
            continue

        try:
            os.remove(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.error(f"failed to remove old log file '{path}': {e}")
            continue
        removed.append(path)

    if removed:
        logger.info(f"Retention: removed {len(removed)} archive(s) older than {max_age}")
    return removed
