#!/usr/bin/env python3
"""Sensitive data detection.

detect() is a pure function: it scans text with every enabled pattern in
registry order and returns the validated matches. It holds no state and
performs no I/O, so identical inputs always produce identical output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from clipshield.patterns import PATTERNS, PatternType


@dataclass(frozen=True)
class Detection:
    """A single sensitive match found in the text.

    Attributes:
        type: Pattern that produced the match.
        label: Human-readable pattern name.
        match: The matched substring, separators included.
    """

    type: PatternType
    label: str
    match: str


def detect(text: str, enabled_patterns: Iterable[PatternType]) -> list[Detection]:
    """Find all sensitive matches in text.

    Patterns run in registry order (credit card, SSN, SIN). Each pattern
    reports every non-overlapping regex match that passes its validator.

    Args:
        text: Text to scan.
        enabled_patterns: Pattern types to look for.

    Returns:
        Detections ordered by pattern, then by position in the text.
        Empty if no pattern is enabled.
    """
    enabled = frozenset(enabled_patterns)
    results: list[Detection] = []

    for pattern in PATTERNS:
        if pattern.type not in enabled:
            continue
        for m in pattern.regex.finditer(text):
            match = m.group()
            if pattern.validate is not None and not pattern.validate(match):
                continue
            results.append(Detection(pattern.type, pattern.type.label, match))

    return results


def primary_label(detections: list[Detection]) -> str | None:
    """Return the label of the first detection, or None if there are none."""
    if not detections:
        return None
    return detections[0].label


def summarize(detections: list[Detection]) -> str:
    """Join the distinct detection labels in order of first appearance.

    Args:
        detections: Detections as returned by detect().

    Returns:
        Labels separated by ", ", e.g. "Credit Card, SSN (US)".
    """
    return ", ".join(dict.fromkeys(d.label for d in detections))
