#!/usr/bin/env python3
"""Contracts between the monitor and its collaborators.

The monitor reaches the clipboard, timers, paste keystrokes and
notifications only through these protocols. Settings come from the
concrete SettingsStore. The X11 and asyncio
implementations live in their own modules; tests substitute in-memory
fakes.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol


class ClipboardGateway(Protocol):
    """Access to the shared clipboard."""

    def change_count(self) -> int:
        """Return a counter that increases on every write by anyone."""
        ...

    def read_text(self) -> str | None:
        """Return the current clipboard text, or None if there is none."""
        ...

    def write_concealed(self, text: str) -> None:
        """Write text marked for clipboard managers to auto-expire.

        Must increase change_count().
        """
        ...

    def clear(self) -> None:
        """Empty the clipboard. Must increase change_count()."""
        ...


class Scheduler(Protocol):
    """Repeating and one-shot timers delivered on one execution context."""

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> Any:
        ...

    def schedule_once(self, delay: float, callback: Callable[[], None]) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        """Cancel a handle. A cancelled handle never fires afterwards."""
        ...


class PasteSignalSource(Protocol):
    """Optional source of paste keystroke events."""

    def is_available(self) -> bool:
        """Return True if paste keystrokes can be observed."""
        ...

    def install(self, callback: Callable[[], None]) -> bool:
        """Start delivering paste events to callback.

        Returns:
            True if installed, False if the capability is missing.
        """
        ...

    def remove(self) -> None:
        """Stop delivering paste events."""
        ...


class Notifier(Protocol):
    """Fire-and-forget user notifications."""

    def notify(self, message: str) -> None:
        ...
