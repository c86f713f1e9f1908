#!/usr/bin/env python3
"""X11 clipboard gateway.

X11 has no clipboard change counter and no synchronous read: the content
lives with whichever client owns the CLIPBOARD selection and is fetched
with ConvertSelection, answered later by a SelectionNotify event. This
gateway turns that into the counter/read/write/clear contract the monitor
expects:

- XFixes ownership notifications start an asynchronous read.
- When the read completes the text is cached and the counter increments.
- read_text() returns the cached text and never blocks.
- Our own writes take ownership, update the cache and increment the
  counter immediately.

All handlers run on the asyncio event loop via X11EventPump.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from Xlib import X

from clipshield.x11_constants import CLIPBOARD_TIMEOUT, SELECTION_PROPERTY
from clipshield.x11_events import is_owner_notify
from clipshield.x11_selection import SelectionContent, handle_selection_request

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.protocol.rq import Event
    from Xlib.xobject.drawable import Window

    from clipshield.x11_events import X11EventPump

logger = logging.getLogger(__name__)


def _resource_id(value: object) -> int:
    """Return the X resource id of a window field, which may be a bare int."""
    return getattr(value, "id", value)  # type: ignore[return-value]


class X11ClipboardGateway:
    """ClipboardGateway backed by the X11 CLIPBOARD selection."""

    def __init__(
        self,
        display: Display,
        window: Window,
        pump: X11EventPump,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        """Create the gateway and register it with the event pump.

        Args:
            display: The X11 display connection.
            window: Hidden window used for ownership and reads.
            pump: Event pump delivering X11 events.
            loop: Event loop for read timeouts.
        """
        self._display = display
        self._window = window
        self._pump = pump
        self._loop = loop
        self._clipboard_atom = display.intern_atom("CLIPBOARD")
        self._utf8_atom = display.intern_atom("UTF8_STRING")
        self._incr_atom = display.intern_atom("INCR")
        self._property_atom = display.intern_atom(SELECTION_PROPERTY)

        self._change_count = 0
        self._text: str | None = None
        self._content: SelectionContent | None = None
        self._owned = False
        self._acquisition_time: int | None = None
        self._reads_pending = 0
        self._read_timeout: asyncio.TimerHandle | None = None
        # Set by our own writes until the next read is requested
        self._superseded = False
        self._waiters: list[asyncio.Future[str | None]] = []

        pump.add_handler(self.handle_event)

    # ClipboardGateway

    def change_count(self) -> int:
        """Return the change counter after handling pending X11 events."""
        self._pump.drain()
        return self._change_count

    def read_text(self) -> str | None:
        """Return the most recently read or written clipboard text."""
        return self._text

    def write_concealed(self, text: str) -> None:
        """Own CLIPBOARD and serve text with the clipboard-manager hint."""
        self._take_ownership(SelectionContent(text.encode("utf-8"), concealed=True))
        self._update_text(text)

    def clear(self) -> None:
        """Own CLIPBOARD with no content, so pastes receive nothing."""
        self._take_ownership(None)
        self._update_text(None)

    # Reading

    async def refresh(self) -> str | None:
        """Read the clipboard now and wait for the result.

        Returns:
            Clipboard text, or None if empty, unreadable or timed out.
        """
        owner = self._display.get_selection_owner(self._clipboard_atom)
        if _resource_id(owner) == X.NONE:
            self._update_text(None)
            return None
        if _resource_id(owner) == self._window.id:
            return self._text
        future: asyncio.Future[str | None] = self._loop.create_future()
        self._waiters.append(future)
        self._request_read()
        return await future

    def _request_read(self) -> None:
        """Ask the current owner to convert CLIPBOARD to UTF8_STRING."""
        self._window.convert_selection(
            self._clipboard_atom, self._utf8_atom, self._property_atom, X.CurrentTime
        )
        self._display.flush()
        self._superseded = False
        self._reads_pending += 1
        if self._read_timeout is not None:
            self._read_timeout.cancel()
        self._read_timeout = self._loop.call_later(CLIPBOARD_TIMEOUT, self._on_read_timeout)

    def _on_read_timeout(self) -> None:
        logger.debug("Clipboard read timed out after %s seconds", CLIPBOARD_TIMEOUT)
        self._read_timeout = None
        self._reads_pending = 0
        self._resolve_waiters(self._text)

    def _on_selection_notify(self, event: Event) -> None:
        if self._owned or self._superseded:
            # Answer to a read requested before our own write; the cache
            # already holds what we serve
            logger.debug("Dropping stale clipboard read reply")
            if event.property != X.NONE:
                self._discard_property()
            return
        if event.property == X.NONE:
            logger.debug("Clipboard owner refused UTF8_STRING conversion")
            text = None
        else:
            text = self._read_property()
        if self._reads_pending > 0:
            self._reads_pending -= 1
        if self._reads_pending == 0 and self._read_timeout is not None:
            self._read_timeout.cancel()
            self._read_timeout = None
        self._update_text(text)

    def _cancel_reads(self) -> None:
        """Forget reads still in flight so their replies are dropped."""
        self._superseded = True
        self._reads_pending = 0
        if self._read_timeout is not None:
            self._read_timeout.cancel()
            self._read_timeout = None

    def _discard_property(self) -> None:
        from Xlib.error import XError

        try:
            self._window.delete_property(self._property_atom)
            self._display.flush()
        except XError as e:
            logger.debug("Failed to delete selection property: %s", e)

    def _read_property(self) -> str | None:
        """Read and delete the selection property from our window.

        Returns:
            Decoded text, or None if missing, an INCR transfer or unreadable.
        """
        from Xlib.error import XError

        try:
            prop = self._window.get_full_property(self._property_atom, X.AnyPropertyType)
            self._window.delete_property(self._property_atom)
            self._display.flush()
        except XError as e:
            logger.debug("Failed to read selection property: %s", e)
            return None

        if prop is None:
            logger.debug("Selection property was empty")
            return None
        if prop.property_type == self._incr_atom:
            logger.debug("Incremental clipboard transfers are not supported")
            return None

        data = prop.value
        if isinstance(data, str):
            return data
        return bytes(data).decode("utf-8", errors="replace")

    # Ownership

    def _take_ownership(self, content: SelectionContent | None) -> None:
        self._content = content
        self._cancel_reads()
        self._window.set_selection_owner(self._clipboard_atom, X.CurrentTime)
        self._display.flush()

        # Verify we got ownership
        owner = self._display.get_selection_owner(self._clipboard_atom)
        self._owned = _resource_id(owner) == self._window.id
        if not self._owned:
            logger.error("Failed to acquire clipboard ownership")

    def _on_owner_notify(self, event: Event) -> None:
        owner_id = _resource_id(event.owner)
        if owner_id == self._window.id:
            self._acquisition_time = event.timestamp
            return
        self._owned = False
        self._acquisition_time = None
        if owner_id == X.NONE:
            logger.debug("Clipboard owner went away")
            self._update_text(None)
        else:
            self._request_read()

    # Events

    def handle_event(self, event: Event) -> None:
        """Dispatch one X11 event from the pump."""
        if event.type == X.SelectionRequest:
            if self._owned:
                handle_selection_request(
                    self._display, event, self._content, self._acquisition_time
                )
        elif event.type == X.SelectionNotify:
            if event.selection == self._clipboard_atom:
                self._on_selection_notify(event)
        elif event.type == X.SelectionClear:
            self._owned = False
        elif is_owner_notify(event):
            if event.selection == self._clipboard_atom:
                self._on_owner_notify(event)

    def _update_text(self, text: str | None) -> None:
        self._text = text
        self._change_count += 1
        self._resolve_waiters(text)

    def _resolve_waiters(self, text: str | None) -> None:
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(text)
