#!/usr/bin/env python3
"""Timing constants for the clipboard monitor."""

# Seconds between clipboard polls.
POLL_INTERVAL: float = 0.5

# Seconds after our own clipboard write during which counter changes are
# attributed to that write and ignored.
DEBOUNCE_INTERVAL: float = 0.3

# Seconds between countdown ticks.
COUNTDOWN_TICK: float = 1.0

NOTIFICATION_TITLE: str = "ClipShield"

CLEARED_MESSAGE: str = "Sensitive data cleared from clipboard"
