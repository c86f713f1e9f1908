#!/usr/bin/env python3
"""Desktop notifications via plyer.

Notifications are fire-and-forget: delivery failures are logged and never
propagate, since the clipboard has already been cleared by the time a
notification is sent.
"""

from __future__ import annotations

import logging

from clipshield.monitor_constants import NOTIFICATION_TITLE

logger = logging.getLogger(__name__)

# Seconds the notification stays on screen.
NOTIFICATION_TIMEOUT: int = 6


class PlyerNotifier:
    """Send notifications through the platform backend chosen by plyer."""

    def __init__(
        self, title: str = NOTIFICATION_TITLE, timeout: int = NOTIFICATION_TIMEOUT
    ) -> None:
        self.title = title
        self.timeout = timeout

    def notify(self, message: str) -> None:
        """Show message as a desktop notification.

        Args:
            message: Notification body.
        """
        from plyer import notification

        try:
            notification.notify(title=self.title, message=message, timeout=self.timeout)
        except Exception as e:
            # plyer raises NotImplementedError without a backend (no D-Bus, no notify-send)
            logger.warning("Notification not delivered: %s", e)
