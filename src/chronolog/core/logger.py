from __future__ import annotations

"""
Size-Rotating Logger.

Owns the open log handle and the byte counter, both guarded by a single
lock shared by writes, the scheduler's rotation check and close. Runtime
failures are reported on the diagnostics channel and never raised to the
caller; construction failures are raised.
"""

import logging
import threading
from types import TracebackType
from typing import BinaryIO, Optional, Type, Union

from chronolog.core.formatter import format_record, render_timestamp
from chronolog.core.jobs import BackgroundJobs
from chronolog.core.rotator import Rotator
from chronolog.core.scheduler import RotationScheduler, SchedulerState
from chronolog.domain.config import LoggerConfig
from chronolog.domain.models import LoggerClosedError, LogLevel, LogRecord
from chronolog.infra.fs import open_log_file

logger = logging.getLogger(__name__)


class Logger:
    """
    Append-only log writer with size-based rotation.

    The rotation scheduler starts with the instance. :meth:`close` is
    single-use and consumes the logger: a second call raises
    :class:`LoggerClosedError`, and writes after close are dropped.

    Args:
        config: Settings; unset fields receive their defaults here.

    Raises:
        ConfigError: If the configuration is invalid.
        LoggerInitError: If the log file cannot be prepared.
    """

    def __init__(self, config: LoggerConfig) -> None:
        self._config = config.normalized()
        self._lock = threading.Lock()
        self._closed = False

        # Raises before any thread exists, so a failed construction leaves nothing behind
        self._file: Optional[BinaryIO]
        self._file, self._size = open_log_file(self._config.file_path)

        self._jobs = BackgroundJobs(self._config.max_background_jobs)
        self._rotator = Rotator(self._config, self._jobs)
        self._scheduler = RotationScheduler(
            self.check_rotation,
            self._config.rotation_check_interval,
        )
        self._scheduler.start()
        logger.debug(
            f"Logger opened {self._config.file_path} "
            f"(size={self._size}, max_size={self._config.max_size})"
        )

    # -------------------------------------------------------------------------
    # PROPERTIES
    # -------------------------------------------------------------------------

    @property
    def config(self) -> LoggerConfig:
        """Effective configuration, defaults included."""
        return self._config

    @property
    def size(self) -> int:
        """Bytes in the active file as tracked by the writer."""
        with self._lock:
            return self._size

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def scheduler_state(self) -> SchedulerState:
        return self._scheduler.state

    # -------------------------------------------------------------------------
    # WRITING
    # -------------------------------------------------------------------------

    def write(self, level: Union[LogLevel, str], message: str) -> None:
        """
        Append one record. Never raises; failures are reported and the
        message is dropped.

        Args:
            level: Severity, as a LogLevel or its name.
            message: Arbitrary text, written verbatim.
        """
        try:
            lvl = LogLevel.parse(level)
        except ValueError as e:
            logger.error(f"failed to write log entry: {e}")
            return

        with self._lock:
            if self._file is None:
                state = "closed" if self._closed else "not open"
                logger.error(f"failed to write to log file: log file is {state}")
                return
            try:
                record = LogRecord(
                    timestamp=render_timestamp(self._config.timestamp_format),
                    level=lvl,
                    message=str(message),
                )
                data = format_record(record, structured=self._config.json_format)
            except (TypeError, ValueError) as e:
                logger.error(f"failed to format log entry: {e}")
                return

            try:
                self._file.write(data)
                self._file.flush()
            except (OSError, ValueError) as e:
                logger.error(f"failed to write to log file: {e}")
                return
            self._size += len(data)

    def debug(self, message: str) -> None:
        self.write(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self.write(LogLevel.INFO, message)

    def warning(self, message: str) -> None:
        self.write(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self.write(LogLevel.ERROR, message)

    def fatal(self, message: str) -> None:
        """Write a FATAL record. The process keeps running."""
        self.write(LogLevel.FATAL, message)

    # -------------------------------------------------------------------------
    # ROTATION
    # -------------------------------------------------------------------------

    def check_rotation(self) -> bool:
        """
        Rotate if the tracked size reached the threshold.

        Called by the scheduler on every tick. Rotation errors are reported,
        not raised.

        Returns:
            bool: True if a rotation completed.
        """
        with self._lock:
            if self._closed or self._size < self._config.max_size:
                return False
            return self._rotate_locked()

    def rotate(self) -> bool:
        """Rotate now, regardless of size. Returns True on success."""
        with self._lock:
            if self._closed:
                logger.error("failed to rotate log file: logger is closed")
                return False
            return self._rotate_locked()

    def wait_for_maintenance(self, timeout: Optional[float] = None) -> bool:
        """Block until pending compression and sweep jobs have finished."""
        return self._jobs.wait(timeout)

    def _rotate_locked(self) -> bool:
        handle, self._file = self._file, None
        try:
            self._file, self._size = self._rotator.rotate(handle)
        except Exception as e:
            logger.error(f"failed to rotate log file: {e}")
            return False
        return True

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """
        Stop the scheduler, close the file and drain maintenance jobs.

        Single-use.

        Raises:
            LoggerClosedError: If the logger was already closed.
            OSError: If the final close of the file fails.
        """
        if self._closed:
            raise LoggerClosedError("logger is already closed")
        self._closed = True

        self._scheduler.stop()
        try:
            with self._lock:
                handle, self._file = self._file, None
                if handle is not None:
                    handle.close()
        finally:
            self._jobs.shutdown(wait=True)
        logger.debug(f"Logger closed {self._config.file_path}")

    def __enter__(self) -> Logger:
        return self

    def __exit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
    ) -> None:
        if not self._closed:
            self.close()

    def __repr__(self) -> str:
        return f"Logger(file_path={self._config.file_path!r}, closed={self._closed})"
