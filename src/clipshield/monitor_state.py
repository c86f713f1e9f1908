#!/usr/bin/env python3
"""Monitor states and the status pushed to observers.

MonitorState is a tagged union of three frozen dataclasses. Exactly one
is current at any time; only ClipboardMonitor replaces it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Idle:
    """No sensitive content is pending."""


@dataclass(frozen=True)
class Counting:
    """Sensitive content is on the clipboard and will be cleared.

    Attributes:
        seconds_left: Whole seconds until the clipboard is cleared.
        accelerated: True once a paste shortened the countdown.
    """

    seconds_left: int
    accelerated: bool = False


@dataclass(frozen=True)
class Cleared:
    """The clipboard was cleared, automatically or on request."""


MonitorState = Union[Idle, Counting, Cleared]

IDLE = Idle()
CLEARED = Cleared()


@dataclass(frozen=True)
class StatusSnapshot:
    """Observable monitor status, pushed after every transition.

    Attributes:
        state: Current monitor state.
        detection_count: Number of times the clipboard was cleared.
        last_detection_label: Label of the most recent detection, if any.
    """

    state: MonitorState
    detection_count: int
    last_detection_label: str | None


def describe(status: StatusSnapshot) -> str:
    """Render a status as a one-line human-readable summary."""
    state = status.state
    if isinstance(state, Counting):
        reason = " after paste" if state.accelerated else ""
        label = status.last_detection_label or "Sensitive data"
        return f"{label} detected, clearing in {state.seconds_left}s{reason}"
    if isinstance(state, Cleared):
        return f"Clipboard cleared ({status.detection_count} total)"
    return "Clipboard clean"
