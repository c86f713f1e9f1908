#!/usr/bin/env python3
"""Sensitive data pattern registry.

Each pattern pairs a PatternType with a compiled regex and an optional
validator. The registry order is fixed: credit cards, then US Social
Security numbers, then Canadian Social Insurance numbers. Detection
callers treat the first result as the primary label, so ties are broken
by this order rather than by position in the text.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Callable

from clipshield.luhn import luhn

# Card numbers are 13 to 19 digits long (ISO/IEC 7812).
CARD_MIN_DIGITS: int = 13
CARD_MAX_DIGITS: int = 19

_SEPARATORS = re.compile(r"[\s-]")


class PatternConfigurationError(ValueError):
    """Raised when a detection pattern cannot be compiled."""


class PatternType(enum.Enum):
    """Kinds of sensitive data the detector recognizes."""

    CREDIT_CARD = "cc"
    SSN = "ssn"
    SIN = "sin"

    @property
    def label(self) -> str:
        """Human-readable name shown in notifications and status."""
        return _LABELS[self]


_LABELS = {
    PatternType.CREDIT_CARD: "Credit Card",
    PatternType.SSN: "SSN (US)",
    PatternType.SIN: "SIN (CA)",
}


@dataclass(frozen=True)
class Pattern:
    """A registered detection pattern.

    Attributes:
        type: The kind of data this pattern finds.
        regex: Compiled expression scanned over the whole text.
        validate: Optional predicate applied to each regex match.
    """

    type: PatternType
    regex: re.Pattern[str]
    validate: Callable[[str], bool] | None = None


def compile_pattern(source: str) -> re.Pattern[str]:
    """Compile a pattern source, failing loudly on a malformed expression.

    Args:
        source: Regular expression source.

    Returns:
        The compiled expression.

    Raises:
        PatternConfigurationError: If the expression does not compile.
    """
    try:
        return re.compile(source)
    except re.error as e:
        raise PatternConfigurationError(f"Invalid pattern {source!r}: {e}") from e


def is_valid_card(match: str) -> bool:
    """Check a card-shaped match for length and Luhn checksum.

    Args:
        match: Matched text, possibly containing spaces or dashes.

    Returns:
        True if the stripped digits are 13-19 long and pass Luhn.
    """
    digits = _SEPARATORS.sub("", match)
    return CARD_MIN_DIGITS <= len(digits) <= CARD_MAX_DIGITS and luhn(digits)


def build_registry() -> tuple[Pattern, ...]:
    """Build the ordered pattern registry."""
    return (
        Pattern(
            PatternType.CREDIT_CARD,
            compile_pattern(r"\b(?:\d[ -]*?){13,19}\b"),
            is_valid_card,
        ),
        Pattern(PatternType.SSN, compile_pattern(r"\b\d{3}-\d{2}-\d{4}\b")),
        Pattern(PatternType.SIN, compile_pattern(r"\b\d{3}[ -]\d{3}[ -]\d{3}\b")),
    )


PATTERNS: tuple[Pattern, ...] = build_registry()

ALL_PATTERN_TYPES: frozenset[PatternType] = frozenset(PatternType)
