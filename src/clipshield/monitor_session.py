#!/usr/bin/env python3
"""
Per-run monitor bookkeeping.

The monitor writes to the same clipboard it watches. Every write bumps
the gateway's change counter, and without tracking the next poll would
treat the monitor's own conceal-write or clear as fresh user input.

The session tracks:
- last_change_count: Counter value already handled; unchanged means no-op
- last_self_write_at: When we last wrote; polls shortly after are ignored
- flagged_text: Text currently counting down; the only de-duplication key

Critical ordering: record_self_write() must be called AFTER the gateway
write so the stored counter includes the write itself.
"""
from dataclasses import dataclass


@dataclass
class MonitorSession:
    """
    Bookkeeping for one run of the monitor.

    Attributes:
        last_change_count: Gateway change counter value last observed.
        last_self_write_at: Clock reading of our last write, or None.
        flagged_text: Sensitive text currently counting down, or None.
        detection_count: Number of times the clipboard was cleared.
        last_detection_label: Primary label of the latest detection.
    """

    last_change_count: int = 0
    last_self_write_at: float | None = None
    flagged_text: str | None = None
    detection_count: int = 0
    last_detection_label: str | None = None

    def has_changed(self, change_count: int) -> bool:
        """
        Check whether the clipboard changed since the last observation.

        Args:
            change_count: Current gateway change counter.

        Returns:
            True if change_count differs from last_change_count.
        """
        return change_count != self.last_change_count

    def observe(self, change_count: int) -> None:
        """
        Record a change counter value as handled.

        Args:
            change_count: Gateway change counter to store.
        """
        self.last_change_count = change_count

    def within_debounce(self, now: float, window: float) -> bool:
        """
        Check whether now falls inside the debounce window of our last write.

        Args:
            now: Current clock reading in seconds.
            window: Debounce window length in seconds.

        Returns:
            True if we wrote less than window seconds ago.
        """
        if self.last_self_write_at is None:
            return False
        return now - self.last_self_write_at < window

    def record_self_write(self, change_count: int, now: float) -> None:
        """
        Record a write made by the monitor itself.

        Call this after the gateway write so change_count includes it.

        Args:
            change_count: Gateway change counter after the write.
            now: Clock reading at the time of the write.
        """
        self.last_change_count = change_count
        self.last_self_write_at = now

    def is_flagged(self, text: str) -> bool:
        """
        Check whether text is already counting down.

        Args:
            text: Clipboard text just read.

        Returns:
            True if text equals flagged_text.
        """
        return self.flagged_text is not None and text == self.flagged_text

    def flag(self, text: str, label: str) -> None:
        """
        Mark text as concealed and counting down.

        Args:
            text: The sensitive clipboard text.
            label: Primary detection label.
        """
        self.flagged_text = text
        self.last_detection_label = label

    def unflag(self) -> None:
        """
        Forget the flagged text.

        Called whenever the countdown resolves to Idle or Cleared, so the
        same text copied again afterwards is detected again.
        """
        self.flagged_text = None

    def record_clear(self) -> None:
        """Count a completed clear and forget the flagged text."""
        self.flagged_text = None
        self.detection_count += 1

    def reset_counters(self) -> None:
        """
        Zero the observable statistics.

        Does not touch the change counter baseline or the flagged text.
        """
        self.detection_count = 0
        self.last_detection_label = None

    def restart(self, change_count: int) -> None:
        """
        Reset per-run tracking for a fresh start of the monitor.

        Keeps detection_count and last_detection_label so statistics
        survive disabling and re-enabling monitoring.

        Args:
            change_count: Gateway change counter to use as the baseline.
        """
        self.last_change_count = change_count
        self.last_self_write_at = None
        self.flagged_text = None
