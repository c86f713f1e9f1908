#!/usr/bin/env python3
"""X11 selection request handling.

While ClipShield owns CLIPBOARD, other applications ask it for the content
through SelectionRequest events and it must answer each one. After a
conceal-write it serves the text plus a hint target telling clipboard
managers to drop the entry from their history. After a clear it owns the
selection with no content and refuses every text target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from clipshield.x11_constants import CONCEAL_TARGET, CONCEAL_VALUE

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.protocol.event import SelectionRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionContent:
    """Content served while we own CLIPBOARD.

    Attributes:
        data: UTF-8 encoded text.
        concealed: Whether to advertise the clipboard-manager hint target.
    """

    data: bytes
    concealed: bool = False


def supported_targets(display: Display, content: SelectionContent | None) -> list[int]:
    """Return the target atoms we can serve for content.

    Args:
        display: The X11 display connection.
        content: Served content, or None after a clear.

    Returns:
        Atom list for a TARGETS reply.
    """
    from Xlib import Xatom

    targets = [display.intern_atom("TARGETS"), display.intern_atom("TIMESTAMP")]
    if content is not None:
        targets += [display.intern_atom("UTF8_STRING"), Xatom.STRING]
        if content.concealed:
            targets.append(display.intern_atom(CONCEAL_TARGET))
    return targets


def handle_selection_request(
    display: Display,
    event: SelectionRequest,
    content: SelectionContent | None,
    acquisition_time: int | None,
) -> None:
    """Respond to a SelectionRequest while owning CLIPBOARD.

    Supports TARGETS, UTF8_STRING, STRING, TIMESTAMP and, for concealed
    content, the clipboard-manager hint target. Unsupported targets and
    text requests after a clear are refused with property=None.

    Args:
        display: The X11 display connection.
        event: The SelectionRequest event.
        content: The content to serve, or None if the clipboard is cleared.
        acquisition_time: X server timestamp when we acquired ownership,
            or None if unknown. Used for TIMESTAMP responses.
    """
    from Xlib import X, Xatom
    from Xlib.protocol.event import SelectionNotify as SelectionNotifyEvent

    targets_atom = display.intern_atom("TARGETS")
    utf8_atom = display.intern_atom("UTF8_STRING")
    timestamp_atom = display.intern_atom("TIMESTAMP")
    conceal_atom = display.intern_atom(CONCEAL_TARGET)
    logger.debug("SelectionRequest target=%s prop=%s", event.target, event.property)

    if event.target == targets_atom:
        event.requestor.change_property(
            event.property, Xatom.ATOM, 32, supported_targets(display, content)
        )
    elif content is not None and event.target in (utf8_atom, Xatom.STRING):
        event.requestor.change_property(event.property, event.target, 8, content.data)
    elif content is not None and content.concealed and event.target == conceal_atom:
        event.requestor.change_property(event.property, conceal_atom, 8, CONCEAL_VALUE)
    elif event.target == timestamp_atom and acquisition_time is not None:
        event.requestor.change_property(
            event.property, Xatom.INTEGER, 32, [acquisition_time]
        )
    else:
        # Refuse unsupported target
        event.property = X.NONE

    event.requestor.send_event(
        SelectionNotifyEvent(
            time=event.time,
            requestor=event.requestor.id,
            selection=event.selection,
            target=event.target,
            property=event.property,
        ),
        event_mask=0,
    )
    display.flush()
