from __future__ import annotations

"""
Diagnostics Handlers and the Standard Logging Bridge.

Handler factories for the diagnostics channel, tagging helpers that let
configuration find and replace its own handlers, and ``ChronologHandler``,
which forwards standard ``logging`` records into a Chronolog logger.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Optional

from chronolog.domain.models import LogLevel
from chronolog.infra.fs import ensure_parent_dir
from chronolog.infra.logging.config import DIAGNOSTICS_LOGGER

if TYPE_CHECKING:
    from chronolog.core.logger import Logger

_HANDLER_TAG_ATTR: str = "_chronolog_handler"


# ==============================================================================
# HANDLER TAGGING
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> None:
    """Mark a handler as installed by :func:`configure_logging`."""
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _create_diagnostics_file_handler(
        path: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Build the file handler for the diagnostics channel.

    Returns None (after a note on stderr) when the file cannot be opened,
    so the console channel still works.
    """
    try:
        ensure_parent_dir(path)
        fh = RotatingFileHandler(
            path,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"chronolog: cannot open diagnostics file '{path}': {e}\n")
        return None

    fh.setLevel(level_int)
    fh.setFormatter(formatter)
    _tag_handler(fh)
    return fh


# ==============================================================================
# STANDARD LOGGING BRIDGE
# ==============================================================================

def level_from_stdlib(levelno: int) -> LogLevel:
    """Map a ``logging`` level number onto the Chronolog scale."""
    if levelno >= logging.CRITICAL:
        return LogLevel.FATAL
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARNING
    if levelno >= logging.INFO:
        return LogLevel.INFO
    return LogLevel.DEBUG


class ChronologHandler(logging.Handler):
    """
    Route standard ``logging`` records into a Chronolog logger.

    The Chronolog logger adds its own timestamp and level, so by default
    only the message (with any formatted traceback) is forwarded. Records
    emitted by this package are ignored: they describe failures of the very
    logger they would be written to.

    Args:
        target: Open Chronolog logger.
        level: Minimum ``logging`` level accepted.
    """

    def __init__(self, target: Logger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.target = target
        self.setFormatter(logging.Formatter("%(message)s"))

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == DIAGNOSTICS_LOGGER or record.name.startswith(DIAGNOSTICS_LOGGER + "."):
            return False
        return bool(super().filter(record))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self.target.write(level_from_stdlib(record.levelno), message)
