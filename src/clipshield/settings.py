#!/usr/bin/env python3
"""Monitor settings.

SettingsStore is a small in-memory key/value store with typed defaults.
The monitor never writes to it; it pulls a SettingsSnapshot by value at
each decision point and subscribes to the "enabled" key to start and
stop itself. Values are seeded from command-line options.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

from clipshield.patterns import PatternType

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "enabled": True,
    "clear_delay": 30,
    "post_paste_delay": 2,
    "enable_cc": True,
    "enable_ssn": True,
    "enable_sin": True,
    "show_notification": True,
}

# Settings holding a delay in seconds; a countdown needs at least one tick.
DELAY_KEYS: frozenset[str] = frozenset({"clear_delay", "post_paste_delay"})

PATTERN_KEYS: dict[str, PatternType] = {
    "enable_cc": PatternType.CREDIT_CARD,
    "enable_ssn": PatternType.SSN,
    "enable_sin": PatternType.SIN,
}


class SettingsError(ValueError):
    """Raised for unknown keys or values of the wrong type or range."""


@dataclass(frozen=True)
class SettingsSnapshot:
    """Settings as seen by the monitor at one decision point.

    Attributes:
        enabled: Whether monitoring is active.
        clear_delay_seconds: Countdown length after a detection.
        post_paste_delay_seconds: Countdown length once a paste is seen.
        enabled_patterns: Pattern types to detect.
        show_notification: Whether to notify when the clipboard is cleared.
    """

    enabled: bool = True
    clear_delay_seconds: int = 30
    post_paste_delay_seconds: int = 2
    enabled_patterns: frozenset[PatternType] = frozenset(PatternType)
    show_notification: bool = True


class SettingsStore:
    """Typed key/value settings with change subscriptions."""

    def __init__(self, **overrides: Any) -> None:
        """Create a store holding the defaults, then apply overrides.

        Raises:
            SettingsError: If an override is invalid.
        """
        self._values: dict[str, Any] = dict(DEFAULTS)
        self._subscribers: defaultdict[str, list[Callable[[Any], None]]] = defaultdict(list)
        for key, value in overrides.items():
            self._values[key] = _validate(key, value)

    def get(self, key: str) -> Any:
        """Return the value for key.

        Raises:
            SettingsError: If key is unknown.
        """
        if key not in self._values:
            raise SettingsError(f"Unknown setting: {key}")
        return self._values[key]

    def set(self, key: str, value: Any) -> None:
        """Store a value and notify subscribers of key if it changed.

        Raises:
            SettingsError: If key is unknown or value is invalid.
        """
        value = _validate(key, value)
        if self._values[key] == value:
            return
        self._values[key] = value
        logger.debug("Setting %s changed to %r", key, value)
        for callback in list(self._subscribers[key]):
            callback(value)

    def toggle(self, key: str) -> bool:
        """Flip a boolean setting and return the new value.

        Raises:
            SettingsError: If key is unknown or not boolean.
        """
        if not isinstance(DEFAULTS.get(key), bool):
            raise SettingsError(f"Setting {key} is not a boolean")
        new_value = not self.get(key)
        self.set(key, new_value)
        return new_value

    def subscribe(self, key: str, callback: Callable[[Any], None]) -> None:
        """Call callback with the new value whenever key changes.

        Raises:
            SettingsError: If key is unknown.
        """
        if key not in DEFAULTS:
            raise SettingsError(f"Unknown setting: {key}")
        self._subscribers[key].append(callback)

    def snapshot(self) -> SettingsSnapshot:
        """Return the current settings by value."""
        return SettingsSnapshot(
            enabled=self._values["enabled"],
            clear_delay_seconds=self._values["clear_delay"],
            post_paste_delay_seconds=self._values["post_paste_delay"],
            enabled_patterns=frozenset(
                pattern for key, pattern in PATTERN_KEYS.items() if self._values[key]
            ),
            show_notification=self._values["show_notification"],
        )


def _validate(key: str, value: Any) -> Any:
    """Check a value against the type of its default.

    Args:
        key: Setting name.
        value: Proposed value.

    Returns:
        The value, unchanged.

    Raises:
        SettingsError: On unknown key, wrong type or a delay below 1.
    """
    if key not in DEFAULTS:
        raise SettingsError(f"Unknown setting: {key}")
    expected = type(DEFAULTS[key])
    # bool is a subclass of int; keep them apart
    if type(value) is not expected:
        raise SettingsError(
            f"Setting {key} expects {expected.__name__}, got {type(value).__name__}"
        )
    if key in DELAY_KEYS and value < 1:
        raise SettingsError(f"Setting {key} must be at least 1 second, got {value}")
    return value
