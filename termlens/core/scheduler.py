"""
TermLens Rescan Scheduler
Debounces edit events so a burst of edits triggers a single rescan
"""

import asyncio
import logging
import time
from enum import Enum
from functools import partial
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# call_later(delay_seconds, callback) -> handle with cancel()
CallLater = Callable[[float, Callable[[], None]], Any]


def asyncio_call_later(delay: float, callback: Callable[[], None]):
    """Arm a timer on the running event loop"""
    return asyncio.get_running_loop().call_later(delay, callback)


class SchedulerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class RescanScheduler:
    """
    Two-state debounce: IDLE, or PENDING until a deadline

    Every edit (re)arms the timer; only the last edit of a burst fires.
    """

    def __init__(self,
                 callback: Callable[[], None],
                 debounce_ms: int = 1000,
                 call_later: Optional[CallLater] = None,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize scheduler

        Args:
            callback: The rescan cycle, invoked once per quiet period
            debounce_ms: Quiet period in milliseconds
            call_later: Timer factory; defaults to the running asyncio loop
            clock: Monotonic clock in seconds, used for the reported deadline
        """
        self._callback = callback
        self.debounce_ms = debounce_ms
        self._call_later = call_later or asyncio_call_later
        self._clock = clock or time.monotonic

        self.state = SchedulerState.IDLE
        self.deadline: Optional[float] = None
        self.fire_count = 0
        self._handle = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self.state is SchedulerState.PENDING

    def notify_edit(self):
        """Register an edit event, (re)arming the debounce timer"""
        self._cancel_timer()

        delay = self.debounce_ms / 1000.0
        self._generation += 1
        try:
            handle = self._call_later(delay, partial(self._fire, self._generation))
        except Exception:
            # No timer means nothing pending
            self.state = SchedulerState.IDLE
            self.deadline = None
            logger.error("Could not arm the rescan timer")
            raise

        self._handle = handle
        self.state = SchedulerState.PENDING
        self.deadline = self._clock() + delay

    def cancel(self):
        """Discard a pending rescan"""
        self._cancel_timer()
        self._generation += 1
        self.state = SchedulerState.IDLE
        self.deadline = None

    def flush(self):
        """Run a pending rescan now"""
        if self.pending:
            self._cancel_timer()
            self._fire(self._generation)

    def _cancel_timer(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, generation: int):
        # Superseded timers are ignored even if their cancellation raced
        if generation != self._generation or not self.pending:
            return

        self._handle = None
        self.state = SchedulerState.IDLE
        self.deadline = None
        self.fire_count += 1

        try:
            self._callback()
        except Exception:
            logger.exception("Rescan cycle failed")
