#!/usr/bin/env python3
"""One-shot clipboard scan.

Reads the clipboard once, clears it if it holds sensitive data and
reports what was found. Used by ``clipshield --scan``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from clipshield.detection import Detection, detect, summarize

if TYPE_CHECKING:
    from clipshield.interfaces import ClipboardGateway
    from clipshield.settings import SettingsSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    """Outcome of a one-shot scan.

    Attributes:
        text_present: Whether the clipboard held any text.
        detections: Sensitive matches found, in detection order.
        cleared: Whether the clipboard was cleared.
    """

    text_present: bool
    detections: tuple[Detection, ...] = ()
    cleared: bool = False

    @property
    def message(self) -> str:
        """One-line summary for the terminal and notifications."""
        if not self.text_present:
            return "Clipboard is empty"
        if not self.cleared:
            return "Clipboard is clean"
        return f"Cleared {summarize(list(self.detections))} from clipboard"


def scan_clipboard(gateway: ClipboardGateway, snapshot: SettingsSnapshot) -> ScanResult:
    """Scan the clipboard once and clear it if sensitive data is found.

    Args:
        gateway: Clipboard access.
        snapshot: Settings selecting the enabled patterns.

    Returns:
        What was found and whether the clipboard was cleared.
    """
    text = gateway.read_text()
    if not text:
        return ScanResult(text_present=False)

    detections = detect(text, snapshot.enabled_patterns)
    if not detections:
        return ScanResult(text_present=True)

    gateway.clear()
    logger.info("Cleared %s from clipboard", summarize(detections))
    return ScanResult(text_present=True, detections=tuple(detections), cleared=True)
