#!/usr/bin/env python3
"""Paste keystroke detection via XInput 2 raw key events.

Raw key events selected on the root window are delivered regardless of
which window has focus. The source tracks held Control and Shift keys
and reports Ctrl+V (with any extra modifiers, so Ctrl+Shift+V counts)
and Shift+Insert as pastes.

Paste detection is optional. Without the XInputExtension, or with a
version older than 2.0, is_available() returns False and the monitor
runs without countdown acceleration.
"""

from __future__ import annotations

import logging
import struct
from typing import TYPE_CHECKING, Callable

from Xlib import XK

from clipshield.x11_constants import GENERIC_EVENT_CODE, XINPUT_MIN_VERSION

if TYPE_CHECKING:
    import asyncio

    from Xlib.display import Display
    from Xlib.protocol.rq import Event

    from clipshield.x11_events import X11EventPump

logger = logging.getLogger(__name__)

# Raw event payload after evtype: deviceid (CARD16), time (CARD32), detail (CARD32).
_RAW_EVENT_HEAD = struct.Struct("=HII")


def event_keycode(event: Event) -> int | None:
    """Return the keycode carried by an XInput key event.

    python-xlib parses some XInput events into structs and leaves others
    as raw bytes, so both forms are accepted.

    Args:
        event: XInput generic event.

    Returns:
        The keycode, or None if the payload is too short.
    """
    data = event.data
    detail = getattr(data, "detail", None)
    if detail is not None:
        return detail
    if isinstance(data, (bytes, bytearray)) and len(data) >= _RAW_EVENT_HEAD.size:
        return _RAW_EVENT_HEAD.unpack_from(data)[2]
    return None


class XInputPasteSignalSource:
    """PasteSignalSource reporting paste key combinations typed anywhere."""

    def __init__(
        self,
        display: Display,
        pump: X11EventPump,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._display = display
        self._pump = pump
        self._loop = loop
        self._opcode: int | None = None
        self._queried = False
        self._callback: Callable[[], None] | None = None
        self._held: set[int] = set()
        self._control_codes: frozenset[int] = frozenset()
        self._shift_codes: frozenset[int] = frozenset()
        self._v_codes: frozenset[int] = frozenset()
        self._insert_codes: frozenset[int] = frozenset()

    def is_available(self) -> bool:
        """Return True if the server supports XInput 2 raw key events."""
        if not self._queried:
            self._opcode = self._query_opcode()
            self._queried = True
        return self._opcode is not None

    def _query_opcode(self) -> int | None:
        """Query the XInput extension.

        Returns:
            The extension major opcode, or None if unusable.
        """
        from Xlib.error import XError

        try:
            info = self._display.query_extension("XInputExtension")
            if info is None:
                logger.info("XInputExtension not present")
                return None
            version = self._display.xinput_query_version()
        except (XError, AttributeError) as e:
            logger.info("XInput query failed: %s", e)
            return None

        found = (version.major_version, version.minor_version)
        if found < XINPUT_MIN_VERSION:
            logger.info("XInput %s.%s is too old for raw key events", *found)
            return None
        return info.major_opcode

    def install(self, callback: Callable[[], None]) -> bool:
        """Select raw key events on the root window and start reporting.

        Args:
            callback: Called on the event loop for every paste keystroke.

        Returns:
            True if installed, False if XInput 2 is unavailable.
        """
        from Xlib.ext import xinput

        if not self.is_available():
            return False

        self._control_codes = self._keycodes(XK.XK_Control_L, XK.XK_Control_R)
        self._shift_codes = self._keycodes(XK.XK_Shift_L, XK.XK_Shift_R)
        self._v_codes = self._keycodes(XK.XK_v, XK.XK_V)
        self._insert_codes = self._keycodes(XK.XK_Insert)

        self._select(xinput.RawKeyPressMask | xinput.RawKeyReleaseMask)
        self._callback = callback
        self._held.clear()
        self._pump.add_handler(self.handle_event)
        logger.debug("Paste detection installed")
        return True

    def remove(self) -> None:
        """Stop selecting raw key events and drop the callback."""
        if self._callback is None:
            return
        self._pump.remove_handler(self.handle_event)
        self._select(0)
        self._callback = None
        self._held.clear()
        logger.debug("Paste detection removed")

    def _select(self, mask: int) -> None:
        from Xlib.ext import xinput

        root = self._display.screen().root
        root.xinput_select_events([(xinput.AllMasterDevices, mask)])
        self._display.flush()

    def _keycodes(self, *keysyms: int) -> frozenset[int]:
        return frozenset(
            keycode
            for keysym in keysyms
            for keycode, _ in self._display.keysym_to_keycodes(keysym)
        )

    def handle_event(self, event: Event) -> None:
        """Track modifiers and report paste combinations."""
        from Xlib.ext import xinput

        if self._callback is None:
            return
        if event.type != GENERIC_EVENT_CODE or event.extension != self._opcode:
            return

        keycode = event_keycode(event)
        if keycode is None:
            return

        if event.evtype == xinput.RawKeyPress:
            if keycode in self._control_codes or keycode in self._shift_codes:
                self._held.add(keycode)
            elif self._is_paste(keycode):
                # Runs after the current drain, never inside another transition
                self._loop.call_soon(self._deliver)
        elif event.evtype == xinput.RawKeyRelease:
            self._held.discard(keycode)

    def _is_paste(self, keycode: int) -> bool:
        if keycode in self._v_codes and bool(self._held & self._control_codes):
            return True
        return keycode in self._insert_codes and bool(self._held & self._shift_codes)

    def _deliver(self) -> None:
        if self._callback is not None:
            self._callback()
