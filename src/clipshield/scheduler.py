#!/usr/bin/env python3
"""Timers on the asyncio event loop.

All monitor events (poll ticks, countdown ticks, the countdown deadline)
are delivered as callbacks on one event loop, so no two transitions ever
run concurrently. Repeating timers re-arm against absolute deadlines to
avoid drift from callback latency.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class RepeatingHandle:
    """Handle for a timer that fires every interval seconds until cancelled.

    Attributes:
        interval: Seconds between firings.
        fired: Number of times the callback has run.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.interval = interval
        self.fired = 0
        self._loop = loop
        self._callback = callback
        self._cancelled = False
        self._next_deadline = loop.time() + interval
        self._timer: asyncio.TimerHandle | None = loop.call_at(
            self._next_deadline, self._fire
        )

    def _fire(self) -> None:
        """Run the callback and arm the next firing."""
        if self._cancelled:
            return
        self._next_deadline += self.interval
        # Skip deadlines missed while the loop was busy
        now = self._loop.time()
        if self._next_deadline <= now:
            missed = int((now - self._next_deadline) // self.interval) + 1
            self._next_deadline += missed * self.interval
        self._timer = self._loop.call_at(self._next_deadline, self._fire)
        self.fired += 1
        self._callback()

    def cancel(self) -> None:
        """Stop the timer. Safe to call more than once."""
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancelled(self) -> bool:
        """Return True if the timer was cancelled."""
        return self._cancelled


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Bind to loop, or to the running loop if none is given.

        Raises:
            RuntimeError: If no loop is given and none is running.
        """
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    def schedule_repeating(
        self, interval: float, callback: Callable[[], None]
    ) -> RepeatingHandle:
        """Call callback every interval seconds.

        Args:
            interval: Seconds between calls, must be positive.
            callback: Function to call on the loop.

        Returns:
            Handle to pass to cancel().
        """
        return RepeatingHandle(self._loop, interval, callback)

    def schedule_once(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        """Call callback once after delay seconds.

        Args:
            delay: Seconds to wait.
            callback: Function to call on the loop.

        Returns:
            Handle to pass to cancel().
        """
        return self._loop.call_later(delay, callback)

    def cancel(self, handle: RepeatingHandle | asyncio.TimerHandle | None) -> None:
        """Cancel a handle returned by this scheduler.

        Accepts None and already-cancelled handles.
        """
        if handle is None:
            return
        handle.cancel()
