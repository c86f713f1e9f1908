#!/usr/bin/env python3
"""In-memory collaborators for monitor tests."""
from __future__ import annotations

from typing import Callable


class FakeGateway:
    """Clipboard gateway holding text in memory."""

    def __init__(self, content: str | None = None) -> None:
        self.count = 0
        self.content = content
        self.concealed_writes: list[str] = []
        self.clears = 0

    def change_count(self) -> int:
        return self.count

    def read_text(self) -> str | None:
        return self.content

    def write_concealed(self, text: str) -> None:
        self.content = text
        self.count += 1
        self.concealed_writes.append(text)

    def clear(self) -> None:
        self.content = None
        self.count += 1
        self.clears += 1

    def simulate_copy(self, text: str | None) -> None:
        """Simulate another application writing the clipboard."""
        self.content = text
        self.count += 1


class FakeTimer:
    """Timer registered with FakeScheduler."""

    def __init__(
        self, due: float, interval: float | None, callback: Callable[[], None], seq: int
    ) -> None:
        self.due = due
        self.interval = interval
        self.callback = callback
        self.seq = seq
        self.cancelled = False
        self.done = False

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.done


class FakeScheduler:
    """Scheduler driven by a manual clock.

    Timers fire only from advance(), in due order; timers due at the same
    moment fire in the order they were scheduled.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []
        self._seq = 0

    def clock(self) -> float:
        return self.now

    def _add(self, delay: float, interval: float | None, callback: Callable[[], None]) -> FakeTimer:
        self._seq += 1
        timer = FakeTimer(self.now + delay, interval, callback, self._seq)
        self.timers.append(timer)
        return timer

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> FakeTimer:
        return self._add(interval, interval, callback)

    def schedule_once(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        return self._add(delay, None, callback)

    def cancel(self, handle: FakeTimer | None) -> None:
        if handle is not None:
            handle.cancelled = True

    def active_timers(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if timer.active]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every timer that falls due."""
        target = self.now + seconds
        while True:
            due = [t for t in self.active_timers() if t.due <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            if timer.interval is None:
                timer.done = True
            else:
                timer.due += timer.interval
            timer.callback()
        self.now = target


class FakePasteSource:
    """Paste signal source triggered by tests."""

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.callback: Callable[[], None] | None = None
        self.installs = 0
        self.removals = 0

    def is_available(self) -> bool:
        return self.available

    def install(self, callback: Callable[[], None]) -> bool:
        if not self.available:
            return False
        self.callback = callback
        self.installs += 1
        return True

    def remove(self) -> None:
        self.callback = None
        self.removals += 1

    def paste(self) -> None:
        """Simulate the user pressing the paste keys."""
        if self.callback is not None:
            self.callback()


class FakeNotifier:
    """Notifier recording messages, optionally failing."""

    def __init__(self, error: Exception | None = None) -> None:
        self.messages: list[str] = []
        self.error = error

    def notify(self, message: str) -> None:
        self.messages.append(message)
        if self.error is not None:
            raise self.error
