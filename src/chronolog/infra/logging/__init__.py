from __future__ import annotations

from .config import DIAGNOSTICS_LOGGER, LoggingConfig
from .core import configure_logging, get_logger, reset_logging
from .handlers import ChronologHandler, level_from_stdlib

__all__ = [
    "DIAGNOSTICS_LOGGER",
    "ChronologHandler",
    "LoggingConfig",
    "configure_logging",
    "get_logger",
    "level_from_stdlib",
    "reset_logging",
]
