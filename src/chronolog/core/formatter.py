from __future__ import annotations

"""
Record Formatting.

Pure functions that render timestamps and turn a LogRecord into the bytes
appended to the log file, either as one JSON object per line or as plain
text.
"""

import json
from datetime import datetime
from typing import Optional

from chronolog.domain.constants import RFC3339
from chronolog.domain.models import LogRecord


def render_timestamp(fmt: str = RFC3339, now: Optional[datetime] = None) -> str:
    """
    Render a local timestamp.

    ``RFC3339`` yields second precision with ``Z`` for a zero offset
    (``2024-05-01T12:00:00Z``) and ``+hh:mm`` otherwise. Any other value is
    handed to :meth:`datetime.strftime`.

    Args:
        fmt: Layout sentinel or strftime pattern.
        now: Instant to render; defaults to the current local time.

    Returns:
        str: The rendered timestamp.
    """
    moment = now if now is not None else datetime.now().astimezone()
    if fmt != RFC3339:
        return moment.strftime(fmt)

    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def format_record(record: LogRecord, *, structured: bool) -> bytes:
    """
    Encode one record as a newline-terminated UTF-8 line.

    Structured:  ``{"timestamp": ..., "level": ..., "message": ...}``
    Plain:       ``<timestamp> - [<LEVEL>]: <message>``

    Lone surrogates never make a record unwritable. Plain lines restore the
    bytes carried by ``surrogateescape`` (``os.fsdecode``, stdin under a
    C locale). JSON lines carry them as ``\\uXXXX`` escapes so the line stays
    valid UTF-8 and decodes back to the same string.
    """
    if structured:
        line = json.dumps(
            {
                "timestamp": record.timestamp,
                "level": record.level.name,
                "message": record.message,
            },
            ensure_ascii=False,
        )
        return (line + "\n").encode("utf-8", errors="backslashreplace")

    line = f"{record.timestamp} - [{record.level.name}]: {record.message}\n"
    try:
        return line.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        # Surrogates outside U+DC80..U+DCFF have no byte to restore
        return line.encode("utf-8", errors="backslashreplace")
