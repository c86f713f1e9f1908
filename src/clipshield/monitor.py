#!/usr/bin/env python3
"""Clipboard monitor state machine.

ClipboardMonitor polls the clipboard gateway, runs detection on new
content, conceals sensitive text and clears it when a countdown expires.
A paste keystroke while counting down restarts the countdown with the
shorter post-paste delay. A manual clear always wins.

The countdown is driven by two timers: a one-second tick for status
updates and a one-shot deadline for the full delay. Whichever reaches
zero first clears the clipboard and cancels the other. Every transition
runs to completion on the scheduler's single execution context.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable

from clipshield.detection import detect
from clipshield.monitor_constants import (
    CLEARED_MESSAGE,
    COUNTDOWN_TICK,
    DEBOUNCE_INTERVAL,
    POLL_INTERVAL,
)
from clipshield.monitor_session import MonitorSession
from clipshield.monitor_state import CLEARED, IDLE, Counting, StatusSnapshot

if TYPE_CHECKING:
    from clipshield.detection import Detection
    from clipshield.interfaces import (
        ClipboardGateway,
        Notifier,
        PasteSignalSource,
        Scheduler,
    )
    from clipshield.monitor_state import MonitorState
    from clipshield.settings import SettingsSnapshot, SettingsStore

logger = logging.getLogger(__name__)

StatusObserver = Callable[[StatusSnapshot], None]


class ClipboardMonitor:
    """Watches the clipboard and clears sensitive content after a delay."""

    def __init__(
        self,
        settings: SettingsStore,
        gateway: ClipboardGateway,
        scheduler: Scheduler,
        notifier: Notifier | None = None,
        paste_source: PasteSignalSource | None = None,
        poll_interval: float = POLL_INTERVAL,
        debounce_interval: float = DEBOUNCE_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create a stopped monitor in the Idle state.

        Subscribes to the "enabled" setting so toggling it starts or
        stops monitoring.

        Args:
            settings: Settings store, read through snapshot().
            gateway: Clipboard access.
            scheduler: Timer source; all callbacks run on its context.
            notifier: Optional notification sink.
            paste_source: Optional paste keystroke source.
            poll_interval: Seconds between clipboard polls.
            debounce_interval: Seconds after our own writes to ignore.
            clock: Monotonic clock in seconds.
        """
        self._settings = settings
        self._gateway = gateway
        self._scheduler = scheduler
        self._notifier = notifier
        self._paste_source = paste_source
        self._poll_interval = poll_interval
        self._debounce_interval = debounce_interval
        self._clock = clock

        self._state: MonitorState = IDLE
        self._session = MonitorSession()
        self._observers: list[StatusObserver] = []
        self._running = False
        self._paste_installed = False
        self._poll_handle: Any = None
        self._tick_handle: Any = None
        self._deadline_handle: Any = None

        settings.subscribe("enabled", self._on_enabled_changed)

    # Observable status

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def detection_count(self) -> int:
        return self._session.detection_count

    @property
    def last_detection_label(self) -> str | None:
        return self._session.last_detection_label

    @property
    def is_counting_down(self) -> bool:
        return isinstance(self._state, Counting)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def status(self) -> StatusSnapshot:
        """Current state and statistics as one value."""
        return StatusSnapshot(
            state=self._state,
            detection_count=self._session.detection_count,
            last_detection_label=self._session.last_detection_label,
        )

    def add_observer(self, observer: StatusObserver) -> None:
        """Register a callable that receives the status after every transition."""
        self._observers.append(observer)

    def remove_observer(self, observer: StatusObserver) -> None:
        """Unregister an observer. Unknown observers are ignored."""
        if observer in self._observers:
            self._observers.remove(observer)

    # Lifecycle

    def start(self) -> None:
        """Begin polling from the current clipboard contents.

        Content already on the clipboard is taken as the baseline and is
        not scanned. Any previous run is stopped first.
        """
        self.stop()
        self._session.restart(self._gateway.change_count())
        self._poll_handle = self._scheduler.schedule_repeating(
            self._poll_interval, self.check_clipboard
        )
        self._install_paste_source()
        self._running = True
        logger.info(
            "Monitor started (poll: %ss, delay: %ss)",
            self._poll_interval,
            self._settings.snapshot().clear_delay_seconds,
        )
        self._set_state(IDLE)

    def stop(self) -> None:
        """Cancel every timer and the paste source. The state is kept as is."""
        self._scheduler.cancel(self._poll_handle)
        self._poll_handle = None
        self._remove_paste_source()
        self._cancel_countdown()
        if self._running:
            logger.info("Monitor stopped")
        self._running = False

    def _on_enabled_changed(self, enabled: bool) -> None:
        """Start or stop when the "enabled" setting changes."""
        if enabled:
            self.start()
        else:
            self.stop()

    # Events

    def check_clipboard(self) -> None:
        """Handle one poll tick."""
        snapshot = self._settings.snapshot()
        if not snapshot.enabled:
            return

        current_count = self._gateway.change_count()
        if not self._session.has_changed(current_count):
            return

        if self._session.within_debounce(self._clock(), self._debounce_interval):
            logger.debug("Change within debounce window of our own write, skipping")
            return

        self._session.observe(current_count)
        text = self._gateway.read_text()
        detections = detect(text, snapshot.enabled_patterns) if text else []

        if detections and not self._session.is_flagged(text):
            self._conceal(text, detections, snapshot)
        elif not detections and self._session.flagged_text is not None:
            logger.info("Clipboard no longer holds sensitive data, countdown cancelled")
            self._cancel_countdown()
            self._session.unflag()
            self._set_state(IDLE)
        elif detections:
            logger.debug("Sensitive text already flagged, skipping")

    def handle_paste_detected(self) -> None:
        """Shorten a running countdown to the post-paste delay."""
        if not self._running or not self.is_counting_down:
            return
        delay = self._settings.snapshot().post_paste_delay_seconds
        logger.info("Paste detected, shortening countdown to %ss", delay)
        self._start_countdown(delay, accelerated=True)

    def clear_now(self) -> None:
        """Clear the clipboard immediately, whatever the current state."""
        self._clear()
        logger.info("Clipboard cleared manually")

    def reset_counter(self) -> None:
        """Zero the clear count and forget the last detection label."""
        self._session.reset_counters()
        self._publish()

    # Countdown

    def _conceal(
        self, text: str, detections: list[Detection], snapshot: SettingsSnapshot
    ) -> None:
        """Re-write text as concealed and start the full countdown."""
        self._gateway.write_concealed(text)
        self._session.record_self_write(self._gateway.change_count(), self._clock())
        label = detections[0].label
        self._session.flag(text, label)
        logger.info("Detected: %s", label)
        self._start_countdown(snapshot.clear_delay_seconds, accelerated=False)

    def _start_countdown(self, seconds: int, accelerated: bool) -> None:
        """Replace any running countdown with a new one of seconds length."""
        self._cancel_countdown()
        self._tick_handle = self._scheduler.schedule_repeating(
            COUNTDOWN_TICK, self._on_countdown_tick
        )
        self._deadline_handle = self._scheduler.schedule_once(
            seconds, self._on_deadline
        )
        self._set_state(Counting(seconds_left=seconds, accelerated=accelerated))

    def _on_countdown_tick(self) -> None:
        state = self._state
        if not isinstance(state, Counting):
            return
        remaining = state.seconds_left - 1
        if remaining <= 0:
            self._expire()
        else:
            self._set_state(Counting(seconds_left=remaining, accelerated=state.accelerated))

    def _on_deadline(self) -> None:
        self._deadline_handle = None
        self._expire()

    def _expire(self) -> None:
        if not self.is_counting_down:
            return
        self._clear()
        logger.info("Clipboard auto-cleared after delay")

    def _cancel_countdown(self) -> None:
        self._scheduler.cancel(self._deadline_handle)
        self._deadline_handle = None
        self._scheduler.cancel(self._tick_handle)
        self._tick_handle = None

    def _clear(self) -> None:
        """Clear the clipboard and move to Cleared.

        The transition is complete before the notification is sent, so a
        failing notifier cannot undo it.
        """
        self._cancel_countdown()
        self._gateway.clear()
        self._session.record_self_write(self._gateway.change_count(), self._clock())
        self._session.record_clear()
        self._set_state(CLEARED)
        self._notify(CLEARED_MESSAGE)

    # Side effects

    def _notify(self, message: str) -> None:
        if self._notifier is None or not self._settings.snapshot().show_notification:
            return
        try:
            self._notifier.notify(message)
        except Exception as e:
            logger.warning("Failed to send notification: %s", e)

    def _install_paste_source(self) -> None:
        source = self._paste_source
        if source is None or not source.is_available():
            logger.info("Paste detection unavailable, countdown will not be shortened")
            return
        self._paste_installed = source.install(self.handle_paste_detected)
        if not self._paste_installed:
            logger.info("Paste detection could not be installed")

    def _remove_paste_source(self) -> None:
        if self._paste_installed and self._paste_source is not None:
            self._paste_source.remove()
        self._paste_installed = False

    def _set_state(self, state: MonitorState) -> None:
        self._state = state
        self._publish()

    def _publish(self) -> None:
        status = self.status
        for observer in list(self._observers):
            observer(status)
