from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Thin wrappers over ``os`` used by the writer and the maintenance jobs:
parent directory creation, append-mode opening with size re-sync, and
best-effort removal.
"""

import logging
import os
from typing import BinaryIO, Optional, Tuple

from chronolog.domain.models import LoggerInitError

logger = logging.getLogger(__name__)

DIR_MODE = 0o755


# -----------------------------------------------------------------------------
# DIRECTORY MANAGEMENT
# -----------------------------------------------------------------------------

def ensure_parent_dir(path: str) -> None:
    """
    Create the parent directory hierarchy of a file path.

    Args:
        path: Target file path.

    Raises:
        OSError: If the hierarchy cannot be created.
    """
    parent = os.path.dirname(os.path.abspath(path))
    if parent:
        os.makedirs(parent, mode=DIR_MODE, exist_ok=True)


# -----------------------------------------------------------------------------
# LOG FILE ACCESS
# -----------------------------------------------------------------------------

def open_log_file(path: str) -> Tuple[BinaryIO, int]:
    """
    Open (or create) a log file for appending and report its current size.

    The size is read from the open descriptor so that content left by a
    previous run is counted toward the rotation threshold.

    Args:
        path: Log file path.

    Returns:
        Tuple[BinaryIO, int]: The binary append handle and its size in bytes.

    Raises:
        LoggerInitError: With the failed step in the message.
    """
    try:
        ensure_parent_dir(path)
    except OSError as e:
        raise LoggerInitError(f"failed to create log directory: {e}") from e

    try:
        handle = open(path, "ab")
    except OSError as e:
        raise LoggerInitError(f"failed to open log file: {e}") from e

    try:
        size = os.fstat(handle.fileno()).st_size
    except OSError as e:
        handle.close()
        raise LoggerInitError(f"failed to stat log file: {e}") from e

    return handle, size


def remove_quietly(path: str) -> Optional[str]:
    """
    Delete a file, reporting instead of raising.

    Returns:
        Optional[str]: None on success (or if already absent), else the error text.
    """
    try:
        os.remove(path)
        return None
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.error(f"failed to remove '{path}': {e}")
        return str(e)
