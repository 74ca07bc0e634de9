from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Declares the command-line schema and translates the parsed namespace into
configuration overrides understood by ``config_from_mapping``.
"""

import argparse
from typing import Any, Dict

from chronolog.domain.constants import APP_NAME, LEVEL_NAMES, VERSION

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the chronolog CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description=(
            "Append lines read from stdin to a log file that rotates by size, "
            "optionally compresses rotated files and prunes old archives."
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    # --- Target ---
    p.add_argument(
        "-p", "--path",
        dest="file_path",
        default=None,
        help="Active log file. Required unless set in --config.",
    )
    p.add_argument(
        "-c", "--config",
        dest="config_file",
        default=None,
        help="JSON file with logger settings; flags override its values.",
    )

    # --- Rotation and retention ---
    p.add_argument(
        "--max-size",
        dest="max_size",
        default=None,
        help="Rotation threshold, e.g. 1048576, 512K, 50MB (default 50MB).",
    )
    p.add_argument(
        "--max-age",
        dest="max_age",
        default=None,
        help="Retention window for compressed archives, e.g. 12h, 7d (default 7d).",
    )
    p.add_argument(
        "--check-interval",
        dest="rotation_check_interval",
        default=None,
        help="Time between size checks, e.g. 30s, 1m (default 1m).",
    )
    p.add_argument(
        "--compress",
        action="store_true",
        help="Gzip rotated files.",
    )

    # --- Line format ---
    p.add_argument(
        "--json",
        dest="json_format",
        action="store_true",
        help="Write one JSON object per line.",
    )
    p.add_argument(
        "--timestamp-format",
        dest="timestamp_format",
        default=None,
        help="strftime pattern for timestamps (default RFC 3339).",
    )
    p.add_argument(
        "-l", "--level",
        default="INFO",
        type=str.upper,
        choices=LEVEL_NAMES,
        help="Severity assigned to every line read from stdin.",
    )

    # --- Diagnostics ---
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Report debug diagnostics on stderr.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the parsed arguments into configuration overrides.

    Only values the user actually supplied are returned, so that a
    configuration file keeps its settings for the others.
    """
    overrides: Dict[str, Any] = {}

    for key in ("file_path", "max_size", "max_age", "rotation_check_interval", "timestamp_format"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value

    if args.compress:
        overrides["compress"] = True
    if args.json_format:
        overrides["json_format"] = True

    return overrides
