from __future__ import annotations

"""
Diagnostics Channel Orchestrator.

Installs the handlers of the ``chronolog`` logger namespace, where runtime
failures of the log writer are reported. Handlers sit behind a
QueueHandler/QueueListener pair so that reporting an error from inside the
writer's critical section never blocks on terminal or disk I/O.
Configuration is idempotent.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from chronolog.infra.logging.config import _LEVEL_MAP, DIAGNOSTICS_LOGGER, LoggingConfig
from chronolog.infra.logging.handlers import (
    _create_diagnostics_file_handler,
    _is_our_handler,
    _tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_chronolog_configured"
_QUEUE_LISTENER_ATTR: str = "_chronolog_queue_listener"
_FALLBACK_FMT: str = "CRITICAL FALLBACK | %(levelname)s | %(name)s | %(message)s"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the diagnostics channel.

    A second call is a no-op unless ``force`` is set, in which case the
    previously installed handlers and listener are torn down first.

    Args:
        cfg: Channel settings.
        force: Replace an existing configuration.

    Returns:
        logging.Logger: The ``chronolog`` namespace logger.
    """
    channel = logging.getLogger(DIAGNOSTICS_LOGGER)

    if getattr(channel, _CONFIGURED_FLAG_ATTR, False) and not force:
        return channel

    try:
        level_int = _parse_level(cfg.level)
        channel.setLevel(level_int)

        _remove_our_handlers(channel)
        _stop_existing_listener(channel)

        handlers_list: List[logging.Handler] = []

        if cfg.console:
            sh = logging.StreamHandler(sys.stderr)
            sh.setLevel(level_int)
            sh.setFormatter(logging.Formatter(cfg.console_fmt))
            _tag_handler(sh)
            handlers_list.append(sh)

        if cfg.diagnostics_file:
            fh = _create_diagnostics_file_handler(
                cfg.diagnostics_file,
                level_int,
                logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
                cfg.max_bytes,
                cfg.backup_count,
            )
            if fh:
                handlers_list.append(fh)

        if not handlers_list:
            # Silence the last-resort stderr handler on purpose
            channel.addHandler(_tagged(logging.NullHandler()))
            channel.propagate = False
            setattr(channel, _CONFIGURED_FLAG_ATTR, True)
            return channel

        log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        queue_handler = QueueHandler(log_queue)
        _tag_handler(queue_handler)

        listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
        listener.start()

        channel.addHandler(queue_handler)
        channel.propagate = False

        setattr(channel, _QUEUE_LISTENER_ATTR, listener)
        setattr(channel, _CONFIGURED_FLAG_ATTR, True)
        atexit.register(_safe_stop_listener, listener)

        return channel

    # Emergency console when the queued pipeline cannot be built
    except Exception:
        try:
            _remove_our_handlers(channel)
            _stop_existing_listener(channel)

            sh = logging.StreamHandler(sys.stderr)
            sh.setFormatter(logging.Formatter(_FALLBACK_FMT))
            _tag_handler(sh)
            channel.addHandler(sh)
            channel.propagate = False

            channel.warning("Diagnostics channel setup failed. Switched to emergency console.")
            return channel
        except Exception:
            return channel


def reset_logging() -> None:
    """Remove everything :func:`configure_logging` installed."""
    channel = logging.getLogger(DIAGNOSTICS_LOGGER)
    _stop_existing_listener(channel)
    _remove_our_handlers(channel)
    channel.propagate = True
    channel.setLevel(logging.NOTSET)
    if hasattr(channel, _CONFIGURED_FLAG_ATTR):
        delattr(channel, _CONFIGURED_FLAG_ATTR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    if not level:
        return logging.WARNING
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.WARNING)


def _tagged(handler: logging.Handler) -> logging.Handler:
    _tag_handler(handler)
    return handler


def _remove_our_handlers(channel: logging.Logger) -> None:
    for h in list(channel.handlers):
        if _is_our_handler(h):
            channel.removeHandler(h)
            h.close()


def _stop_existing_listener(channel: logging.Logger) -> None:
    listener = getattr(channel, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        for h in listener.handlers:
            h.close()
        setattr(channel, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a listener, tolerating one that was already stopped."""
    if listener is None:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
