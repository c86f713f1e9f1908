#!/usr/bin/env python3
"""X11 event registration and dispatch.

This module registers for XFixes clipboard ownership notifications and
pumps X11 events into the asyncio event loop. The display file descriptor
is watched with loop.add_reader(); when it becomes readable, the pump
drains the events already pending without blocking and hands each one to
the registered handlers.

The module handles:
- Registering for XFixes selection change notifications
- Collecting pending events without blocking asyncio
- Dispatching events to the clipboard gateway and paste source
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from clipshield.x11_constants import GENERIC_EVENT_CODE
from clipshield.x11_display import DisplayUnavailableError, get_display_fd

if TYPE_CHECKING:
    import asyncio

    from Xlib.display import Display
    from Xlib.protocol.rq import Event
    from Xlib.xobject.drawable import Window

logger = logging.getLogger(__name__)

EventHandler = Callable[["Event"], None]


def register_xfixes_events(display: Display, window: Window) -> None:
    """Register for XFixes ownership notifications on CLIPBOARD.

    Every time any client (including us) takes ownership of CLIPBOARD or
    the owner goes away, a SetSelectionOwnerNotify event is delivered to
    window.

    Args:
        display: The X11 display connection.
        window: The window to receive selection events.

    Raises:
        DisplayUnavailableError: If the server lacks the XFIXES extension.
    """
    from Xlib.ext import xfixes

    if not display.has_extension("XFIXES"):
        raise DisplayUnavailableError("X server does not support the XFIXES extension")

    # Initialize XFixes extension
    xfixes.query_version(display)

    clipboard_atom = display.intern_atom("CLIPBOARD")
    mask = (
        xfixes.XFixesSetSelectionOwnerNotifyMask
        | xfixes.XFixesSelectionWindowDestroyNotifyMask
        | xfixes.XFixesSelectionClientCloseNotifyMask
    )
    xfixes.select_selection_input(display, window.id, clipboard_atom, mask)
    display.flush()


def is_owner_notify(event: Event) -> bool:
    """Return True for XFixes selection ownership notifications."""
    return type(event).__name__ in (
        "SetSelectionOwnerNotify",
        "SelectionWindowDestroyNotify",
        "SelectionClientCloseNotify",
    )


def process_pending_events(display: Display) -> list[Event]:
    """Collect events already pending without blocking.

    Checks pending_events() before each read to avoid stalling the asyncio
    event loop. Only events ClipShield handles are returned: selection
    requests and replies, XFixes notifications and generic extension
    events (XInput key presses).

    Args:
        display: The X11 display connection.

    Returns:
        List of pending events for processing, in arrival order.
    """
    from Xlib import X

    events: list[Event] = []
    while display.pending_events() > 0:
        event = display.next_event()
        logger.debug("X11 event type=%s class=%s", event.type, type(event).__name__)
        if event.type in (
            X.SelectionRequest,
            X.SelectionNotify,
            X.SelectionClear,
            GENERIC_EVENT_CODE,
        ):
            events.append(event)
        elif is_owner_notify(event):
            events.append(event)
    return events


class X11EventPump:
    """Delivers X11 events to handlers on the asyncio event loop."""

    def __init__(self, display: Display) -> None:
        self._display = display
        self._handlers: list[EventHandler] = []
        self._loop: asyncio.AbstractEventLoop | None = None
        self._draining = False

    def add_handler(self, handler: EventHandler) -> None:
        """Register handler to receive every collected event."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def remove_handler(self, handler: EventHandler) -> None:
        """Unregister handler. Unknown handlers are ignored."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Start draining events whenever the display fd becomes readable.

        Events that python-xlib already buffered are drained immediately,
        since they will not make the fd readable again.

        Args:
            loop: The running event loop.
        """
        self._loop = loop
        loop.add_reader(get_display_fd(self._display), self.drain)
        self.drain()

    def detach(self) -> None:
        """Stop watching the display fd."""
        if self._loop is None:
            return
        self._loop.remove_reader(get_display_fd(self._display))
        self._loop = None

    def drain(self) -> int:
        """Dispatch all pending events to the handlers.

        Handlers may issue X11 round-trips that buffer further events, so
        draining repeats until nothing is pending. Re-entrant calls from
        inside a handler return immediately.

        Returns:
            Number of events dispatched.
        """
        if self._draining:
            return 0
        self._draining = True
        dispatched = 0
        try:
            while True:
                events = process_pending_events(self._display)
                if not events:
                    break
                for event in events:
                    for handler in list(self._handlers):
                        handler(event)
                dispatched += len(events)
        finally:
            self._draining = False
        return dispatched
