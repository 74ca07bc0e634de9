from __future__ import annotations

"""
Log Rotation.

Moves the active log file aside under a timestamped archive name, hands the
archive to the compression job, reopens a fresh file at the original path
and queues a retention sweep. Callers must hold the logger's state lock.
"""

import logging
import os
from datetime import datetime
from typing import BinaryIO, Optional, Tuple

from chronolog.core.compressor import compress_file, compressed_name
from chronolog.core.formatter import render_timestamp
from chronolog.core.jobs import BackgroundJobs
from chronolog.core.retention import sweep
from chronolog.domain.config import LoggerConfig
from chronolog.domain.constants import RFC3339
from chronolog.domain.models import RotationError
from chronolog.infra.fs import open_log_file

logger = logging.getLogger(__name__)


def archive_name(file_path: str, now: Optional[datetime] = None) -> str:
    """
    Pick the archive path for a rotation happening at ``now``.

    The name is ``<path>.<RFC3339>``. When that name, or its compressed
    sibling, is already taken (two rotations within one second) a counter
    is appended: ``<path>.<RFC3339>.1``, ``.2`` and so on.
    """
    base = f"{file_path}.{render_timestamp(RFC3339, now)}"
    candidate = base
    counter = 0
    while os.path.lexists(candidate) or os.path.lexists(compressed_name(candidate)):
        counter += 1
        candidate = f"{base}.{counter}"
    return candidate


class Rotator:
    """
    Executes the rotation steps for one logger.

    Args:
        config: Normalized logger configuration.
        jobs: Pool receiving the detached compression and sweep work.
    """

    def __init__(self, config: LoggerConfig, jobs: BackgroundJobs) -> None:
        self._config = config
        self._jobs = jobs

    def rotate(self, handle: Optional[BinaryIO]) -> Tuple[BinaryIO, int]:
        """
        Close ``handle``, archive the file and open its replacement.

        Each step aborts the remaining ones on failure. The old handle is
        closed once this is called, whatever the outcome.

        Args:
            handle: The currently open log handle.

        Returns:
            Tuple[BinaryIO, int]: The new handle and its size.

        Raises:
            RotationError: With the failed step in the message.
        """
        path = self._config.file_path
        if handle is None:
            raise RotationError("log file is not open")

        try:
            handle.close()
        except OSError as e:
            raise RotationError(f"failed to close log file: {e}") from e

        backup = archive_name(path)
        try:
            os.rename(path, backup)
        except OSError as e:
            raise RotationError(f"failed to rename log file: {e}") from e

        if self._config.compress:
            self._jobs.submit(
                f"compression of {backup}",
                compress_file,
                backup,
                compressed_name(backup),
            )

        try:
            new_handle, size = open_log_file(path)
        except OSError as e:
            raise RotationError(f"failed to create new log file: {e}") from e

        self._jobs.submit(
            f"retention sweep of {path}",
            sweep,
            path,
            self._config.max_age,
        )
        logger.info(f"Rotated {path} -> {backup}")
        return new_handle, size
