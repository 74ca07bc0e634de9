from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: diagnostics setup, configuration merge
(JSON file, then flags), logger construction and the stdin pumping loop.
"""

import json
import sys
from typing import Any, Dict, Iterator, List, Optional, TextIO

from chronolog.core.logger import Logger
from chronolog.domain.config import config_from_mapping, load_config
from chronolog.domain.models import ChronologError, ConfigError, LoggerInitError, LogLevel
from chronolog.infra.logging import LoggingConfig, configure_logging, get_logger
from chronolog.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Command line arguments. Defaults to sys.argv.
        stdin: Input stream. Defaults to sys.stdin.

    Returns:
        int: Process exit code.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    configure_logging(LoggingConfig(level="DEBUG" if args.debug else "WARNING", console=True))

    # 1. Configuration hierarchy: file < flags
    try:
        raw: Dict[str, Any] = load_config(args.config_file) if args.config_file else {}
        raw.update(cli_args.args_to_overrides(args))
        if not raw.get("file_path"):
            parser.error("--path is required (or set file_path in --config)")
        cfg, _ = config_from_mapping(raw)
        effective = cfg.normalized()
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG

    if args.dump_config:
        print(json.dumps(effective.to_dict(), ensure_ascii=False, indent=2))
        return EXIT_OK

    # 2. Logger construction
    try:
        log = Logger(effective)
    except LoggerInitError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG

    # 3. Pump stdin until EOF; the log is closed whatever ends the loop
    level = LogLevel.parse(args.level)
    source = stdin if stdin is not None else sys.stdin
    lines = 0
    interrupted = False
    try:
        for line in _read_lines(source):
            log.write(level, line.rstrip("\r\n"))
            lines += 1
    except KeyboardInterrupt:
        logger.warning("Interrupted; closing log file.")
        interrupted = True
    finally:
        closed = _close(log)

    if interrupted:
        return EXIT_INTERRUPTED
    logger.debug(f"Wrote {lines} line(s) to {effective.file_path}")
    return EXIT_OK if closed else 1


def _read_lines(source: TextIO) -> Iterator[str]:
    """
    Yield input lines without ever failing on undecodable bytes.

    Text streams backed by a binary buffer (``sys.stdin``) are read as bytes
    and decoded with ``surrogateescape``, so the writer can restore the
    original bytes on disk. Pure text streams are iterated as they are.
    """
    buffer = getattr(source, "buffer", None)
    if buffer is None:
        yield from source
        return
    encoding = getattr(source, "encoding", None) or "utf-8"
    for raw in buffer:
        yield raw.decode(encoding, errors="surrogateescape")


def _close(log: Logger) -> bool:
    try:
        log.close()
    except (OSError, ChronologError) as e:
        print(f"ERROR: failed to close log file: {e}", file=sys.stderr)
        return False
    return True
