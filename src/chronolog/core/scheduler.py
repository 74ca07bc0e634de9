from __future__ import annotations

"""
Rotation Scheduler.

Cancellable periodic task driving the size checks. A daemon thread waits on
a cancellation event with the check interval as timeout; every timeout is a
tick. Once cancelled the scheduler is stopped for good.
"""

import logging
import threading
from datetime import timedelta
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class RotationScheduler:
    """
    Fires ``check`` every ``interval`` until :meth:`stop` is called.

    Args:
        check: Callback run on every tick (the logger's rotation check).
        interval: Time between ticks.
        name: Thread name, useful in diagnostics.
    """

    def __init__(
            self,
            check: Callable[[], None],
            interval: timedelta,
            name: str = "ChronologRotationChecker",
    ) -> None:
        self._check = check
        self._interval = interval.total_seconds()
        self._cancel = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._name = name
        self._state = SchedulerState.STOPPED
        self._started = False

    @property
    def state(self) -> SchedulerState:
        return self._state

    def start(self) -> None:
        """
        Launch the background thread.

        Raises:
            RuntimeError: If the scheduler was already started; a stopped
                scheduler cannot be restarted.
        """
        if self._started:
            raise RuntimeError("rotation scheduler can only be started once")
        self._started = True
        self._state = SchedulerState.RUNNING
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()

    def tick(self) -> None:
        """Run one check on the calling thread, reporting any failure."""
        try:
            self._check()
        except Exception as e:
            logger.error(f"rotation check failed: {e}", exc_info=True)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal cancellation and wait for the thread to exit."""
        self._cancel.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._state = SchedulerState.STOPPED

    def _loop(self) -> None:
        while not self._cancel.wait(self._interval):
            self.tick()
        logger.debug("Rotation scheduler stopped.")
