from __future__ import annotations

"""
Detached Maintenance Jobs.

Bounded worker pool for the fire-and-forget work spawned by a rotation
(compression, retention sweeps). Failures are reported on the diagnostics
channel instead of surfacing to whoever submitted the job.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)


class BackgroundJobs:
    """
    Thread pool wrapper with error routing and outstanding-job tracking.
    """

    def __init__(self, max_workers: int) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="ChronologMaintenance",
        )
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, description: str, fn: Callable[..., Any], *args: Any) -> Optional[Future]:
        """
        Schedule ``fn(*args)`` without waiting for it.

        Args:
            description: Human-readable job label used in error reports.
            fn: Callable to run on a worker thread.
            *args: Positional arguments for ``fn``.

        Returns:
            Optional[Future]: The job future, or None if the pool is shut down.
        """
        with self._lock:
            if self._closed:
                logger.error(f"{description} skipped: maintenance pool is shut down")
                return None
            future = self._executor.submit(self._run, description, fn, *args)
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every job submitted so far has finished.

        Returns:
            bool: True if nothing is left running when the call returns.
        """
        with self._lock:
            snapshot = set(self._pending)
        _, not_done = wait_futures(snapshot, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        """Refuse new jobs and optionally wait for queued ones."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    # -------------------------------------------------------------------------
    # INTERNALS
    # -------------------------------------------------------------------------

    @staticmethod
    def _run(description: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except Exception as e:
            logger.error(f"{description} failed: {e}")
            return None

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
