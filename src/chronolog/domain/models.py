from __future__ import annotations

"""
Logging Domain Data Models.

Defines the severity scale, the ephemeral record passed from the writer to
the formatter, and the exception hierarchy shared by every layer.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

# -----------------------------------------------------------------------------
# SEVERITY
# -----------------------------------------------------------------------------

class LogLevel(IntEnum):
    """
    Ordered severity labels.

    FATAL is a label only: writing a FATAL record never stops the process.
    """
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    FATAL = 4

    @classmethod
    def parse(cls, value: Union[LogLevel, str]) -> LogLevel:
        """
        Resolve a level from an enum member or a case-insensitive name.

        Args:
            value: Level instance or its name ("info", "WARN", ...).

        Returns:
            LogLevel: The matching member.

        Raises:
            ValueError: If the name is not a known level.
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        if name == "WARN":
            name = "WARNING"
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"unknown log level: {value!r}") from None


# -----------------------------------------------------------------------------
# RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LogRecord:
    """
    A single entry produced and consumed within one write call.

    Attributes:
        timestamp: Already rendered according to the configured format.
        level: Severity label.
        message: Caller text, stored verbatim.
    """
    timestamp: str
    level: LogLevel
    message: str


# -----------------------------------------------------------------------------
# ERRORS
# -----------------------------------------------------------------------------

class ChronologError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(ChronologError, ValueError):
    """Raised when a configuration value cannot be used."""


class LoggerInitError(ChronologError, OSError):
    """Raised when the logger cannot prepare its output file."""


class RotationError(ChronologError):
    """Raised when a rotation step fails; later steps are not attempted."""


class CompressionError(ChronologError):
    """Raised when an archive cannot be compressed."""


class LoggerClosedError(ChronologError, RuntimeError):
    """Raised when a closed logger is closed again."""
