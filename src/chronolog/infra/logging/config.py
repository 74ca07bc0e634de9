from __future__ import annotations

"""
Diagnostics Channel Configuration.

Settings for the operator-facing stream on which runtime failures of the
logger (dropped writes, failed rotations, compression and sweep errors) are
reported.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

# Accepted level spellings for the diagnostics channel
_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
}

DIAGNOSTICS_LOGGER = "chronolog"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Diagnostics channel settings.

    Attributes:
        level: Minimum severity reported.
        console: Report on stderr.
        diagnostics_file: Optional file that also receives the reports.
        max_bytes: Size limit of the diagnostics file before it rolls over.
        backup_count: Rolled-over diagnostics files kept.
        console_fmt: Line layout on stderr.
        file_fmt: Line layout in the diagnostics file.
        datefmt: Timestamp layout in the diagnostics file.
    """
    level: str = "WARNING"
    console: bool = True
    diagnostics_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "chronolog: %(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%dT%H:%M:%S%z"
