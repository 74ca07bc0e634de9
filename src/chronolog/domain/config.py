from __future__ import annotations

"""
Logger Configuration Domain.

Holds the immutable logger settings and the helpers that turn untrusted
input (JSON files, CLI strings) into a validated configuration. Defaults for
unset fields are applied once, when a logger is constructed.
"""

import json
import logging
import os
import re
from dataclasses import dataclass, fields, replace
from datetime import timedelta
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from chronolog.domain import constants as const
from chronolog.domain.models import ConfigError

logger = logging.getLogger(__name__)

DurationLike = Union[timedelta, int, float, str, None]

_SIZE_UNITS: Dict[str, int] = {
    "": 1,
    "B": 1,
    "K": 1024,
    "KB": 1024,
    "KIB": 1024,
    "M": 1024 ** 2,
    "MB": 1024 ** 2,
    "MIB": 1024 ** 2,
    "G": 1024 ** 3,
    "GB": 1024 ** 3,
    "GIB": 1024 ** 3,
}

_DURATION_UNITS: Dict[str, float] = {
    "": 1.0,
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
    "w": 604800.0,
}

_QUANTITY_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*$")


# -----------------------------------------------------------------------------
# CONFIGURATION MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LoggerConfig:
    """
    Immutable logger settings.

    Zero, empty or None values mean "use the default" and are resolved by
    :meth:`normalized`.

    Attributes:
        file_path: Active log file location. Required.
        max_size: Rotation threshold in bytes.
        max_age: Retention window for compressed archives.
        compress: Gzip archives after rotation.
        json_format: Emit one JSON object per line instead of plain text.
        timestamp_format: ``RFC3339`` or a strftime pattern.
        rotation_check_interval: Period between threshold checks.
        max_background_jobs: Upper bound on concurrent compression/sweep jobs.
    """
    file_path: str
    max_size: int = 0
    max_age: Optional[timedelta] = None
    compress: bool = False
    json_format: bool = False
    timestamp_format: str = ""
    rotation_check_interval: Optional[timedelta] = None
    max_background_jobs: int = 0

    def normalized(self) -> LoggerConfig:
        """
        Return a copy with defaults injected and values validated.

        Raises:
            ConfigError: On an empty path or negative limits.
        """
        if not self.file_path or not str(self.file_path).strip():
            raise ConfigError("file_path is required")
        if self.max_size < 0:
            raise ConfigError(f"max_size must be positive, got {self.max_size}")
        if self.max_background_jobs < 0:
            raise ConfigError(
                f"max_background_jobs must be positive, got {self.max_background_jobs}"
            )
        for name in ("max_age", "rotation_check_interval"):
            value = getattr(self, name)
            if value is not None and value < timedelta(0):
                raise ConfigError(f"{name} must not be negative, got {value}")

        return replace(
            self,
            file_path=os.fspath(self.file_path),
            max_size=self.max_size or const.DEFAULT_MAX_SIZE,
            max_age=self.max_age or const.DEFAULT_MAX_AGE,
            timestamp_format=self.timestamp_format or const.DEFAULT_TIMESTAMP_FORMAT,
            rotation_check_interval=(
                self.rotation_check_interval or const.DEFAULT_ROTATION_CHECK_INTERVAL
            ),
            max_background_jobs=self.max_background_jobs or const.DEFAULT_MAX_BACKGROUND_JOBS,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-friendly primitives (durations as seconds)."""
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, timedelta):
                value = value.total_seconds()
            out[f.name] = value
        return out


# -----------------------------------------------------------------------------
# PARSING HELPERS
# -----------------------------------------------------------------------------

def parse_size(value: Union[int, str]) -> int:
    """
    Convert a byte quantity such as ``1048576``, ``"512K"`` or ``"50MB"``.

    Units are binary (1K = 1024 bytes).

    Raises:
        ConfigError: If the value is negative or not understood.
    """
    if isinstance(value, bool):
        raise ConfigError(f"invalid size: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ConfigError(f"invalid size: {value!r}")
        return value

    match = _QUANTITY_RE.match(str(value))
    if not match:
        raise ConfigError(f"invalid size: {value!r}")
    number, unit = match.groups()
    multiplier = _SIZE_UNITS.get(unit.upper())
    if multiplier is None:
        raise ConfigError(f"unknown size unit {unit!r} in {value!r}")
    return int(float(number) * multiplier)


def parse_duration(value: DurationLike) -> Optional[timedelta]:
    """
    Convert ``"30s"``, ``"1m"``, ``"2h"``, ``"7d"`` or plain seconds into a timedelta.

    ``None`` passes through so that defaults can be applied later.

    Raises:
        ConfigError: If the value is negative or not understood.
    """
    if value is None or isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ConfigError(f"invalid duration: {value!r}")
        return timedelta(seconds=value)

    match = _QUANTITY_RE.match(str(value))
    if not match:
        raise ConfigError(f"invalid duration: {value!r}")
    number, unit = match.groups()
    seconds = _DURATION_UNITS.get(unit.lower())
    if seconds is None:
        raise ConfigError(f"unknown duration unit {unit!r} in {value!r}")
    return timedelta(seconds=float(number) * seconds)


# -----------------------------------------------------------------------------
# MAPPING / FILE LOADING
# -----------------------------------------------------------------------------

def config_from_mapping(
        data: Mapping[str, Any],
        *,
        strict: bool = False,
) -> Tuple[LoggerConfig, List[str]]:
    """
    Build a :class:`LoggerConfig` from loosely typed input.

    Sizes and durations accept the string forms understood by
    :func:`parse_size` and :func:`parse_duration`. Boolean fields accept
    common textual spellings. Unknown keys are ignored with a warning.

    Args:
        data: Raw settings, e.g. a decoded JSON object.
        strict: Raise on unknown keys and coerced booleans instead of warning.

    Returns:
        Tuple[LoggerConfig, List[str]]: The configuration and any warnings.

    Raises:
        ConfigError: On missing path or values that cannot be parsed.
    """
    if not isinstance(data, Mapping):
        raise ConfigError(f"expected a mapping, received {type(data).__name__}")

    warnings: List[str] = []
    known = {f.name for f in fields(LoggerConfig)}
    for key in data:
        if key not in known:
            msg = f"Unknown configuration key '{key}' ignored."
            if strict:
                raise ConfigError(msg)
            warnings.append(msg)

    path = data.get("file_path")
    if not path:
        raise ConfigError("file_path is required")

    cfg = LoggerConfig(
        file_path=str(path),
        max_size=parse_size(data.get("max_size") or 0),
        max_age=parse_duration(data.get("max_age")),
        compress=_as_bool(data.get("compress"), "compress", warnings, strict),
        json_format=_as_bool(data.get("json_format"), "json_format", warnings, strict),
        timestamp_format=str(data.get("timestamp_format") or ""),
        rotation_check_interval=parse_duration(data.get("rotation_check_interval")),
        max_background_jobs=_as_count(data.get("max_background_jobs"), "max_background_jobs"),
    )
    for w in warnings:
        logger.warning(f"Configuration: {w}")
    return cfg, warnings


def load_config(path: str) -> Dict[str, Any]:
    """
    Read a JSON configuration file.

    Raises:
        ConfigError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read configuration file '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in configuration file '{path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"configuration file '{path}' must contain a JSON object")
    logger.debug(f"Configuration loaded from {path}")
    return data


def _as_bool(value: Any, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce JSON/CLI values into booleans."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value

    if not strict and isinstance(value, str):
        s = value.strip().lower()
        if s in ("true", "1", "yes", "y", "on"):
            warnings.append(f"Field '{field}' converted from '{value}' to True.")
            return True
        if s in ("false", "0", "no", "n", "off", ""):
            warnings.append(f"Field '{field}' converted from '{value}' to False.")
            return False

    raise ConfigError(f"Invalid field '{field}': expected bool, received {type(value).__name__}.")


def _as_count(value: Any, field: str) -> int:
    """Coerce a non-negative integer; ``None`` means unset (0)."""
    if value is None:
        return 0
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"Invalid field '{field}': expected a non-negative integer, got {value!r}.")
    return value
