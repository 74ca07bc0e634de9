from __future__ import annotations

"""
Chronolog: single-process append-only logger with size-based rotation,
gzip compression of rotated files and age-based archive retention.
"""

from chronolog.core.logger import Logger
from chronolog.domain.config import LoggerConfig, config_from_mapping, load_config
from chronolog.domain.constants import VERSION
from chronolog.domain.models import (
    ChronologError,
    CompressionError,
    ConfigError,
    LoggerClosedError,
    LoggerInitError,
    LogLevel,
    RotationError,
)

__version__ = VERSION

__all__ = [
    "ChronologError",
    "CompressionError",
    "ConfigError",
    "LogLevel",
    "Logger",
    "LoggerClosedError",
    "LoggerConfig",
    "LoggerInitError",
    "RotationError",
    "config_from_mapping",
    "load_config",
]
