from __future__ import annotations

"""
Domain Constants.

Centralizes default limits, archive naming fragments and the sentinel used
to request RFC 3339 timestamp rendering.
"""

from datetime import timedelta
from typing import Tuple

APP_NAME = "chronolog"
VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_MAX_SIZE = 50 * 1024 * 1024  # 50 MiB
DEFAULT_MAX_AGE = timedelta(days=7)
DEFAULT_ROTATION_CHECK_INTERVAL = timedelta(minutes=1)
DEFAULT_MAX_BACKGROUND_JOBS = 2

# Sentinel for the default layout; any other value is a strftime pattern
RFC3339 = "RFC3339"
DEFAULT_TIMESTAMP_FORMAT = RFC3339

# -----------------------------------------------------------------------------
# ARCHIVES
# -----------------------------------------------------------------------------
COMPRESSED_SUFFIX = ".gz"
COMPRESSION_CHUNK_SIZE = 64 * 1024

# -----------------------------------------------------------------------------
# SEVERITIES
# -----------------------------------------------------------------------------
LEVEL_NAMES: Tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "FATAL")
