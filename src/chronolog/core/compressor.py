from __future__ import annotations

"""
Archive Compression.

Streams a rotated archive through gzip into a ``.gz`` sibling and removes
the uncompressed original once the compressed copy is complete. Runs as a
detached maintenance job and never touches the live log handle.
"""

import gzip
import logging
import os
import shutil
import zlib

from chronolog.domain.constants import COMPRESSED_SUFFIX, COMPRESSION_CHUNK_SIZE
from chronolog.domain.models import CompressionError
from chronolog.infra.fs import remove_quietly

logger = logging.getLogger(__name__)


def compressed_name(source: str) -> str:
    """Return the ``.gz`` sibling path for an archive."""
    return source + COMPRESSED_SUFFIX


def compress_file(source: str, dest: str) -> None:
    """
    Gzip ``source`` into ``dest`` and delete ``source`` on success.

    A partially written ``dest`` is removed on failure; ``source`` is then
    left untouched for manual recovery.

    Args:
        source: Uncompressed archive path.
        dest: Target ``.gz`` path.

    Raises:
        CompressionError: If reading, compressing or writing fails.
    """
    dest_created = False
    try:
        with open(source, "rb") as f_in:
            with gzip.open(dest, "wb") as f_out:
                dest_created = True
                shutil.copyfileobj(f_in, f_out, COMPRESSION_CHUNK_SIZE)
    except (OSError, zlib.error) as e:
        if dest_created:
            remove_quietly(dest)
        raise CompressionError(f"failed to compress '{source}': {e}") from e

    try:
        os.remove(source)
    except OSError as e:
        raise CompressionError(f"failed to remove old log file '{source}': {e}") from e

    logger.debug(f"Compressed archive {source} -> {dest}")
