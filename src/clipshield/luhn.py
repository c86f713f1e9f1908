#!/usr/bin/env python3
"""Luhn mod-10 checksum.

Payment card numbers carry a trailing check digit computed with the Luhn
algorithm. The credit card pattern uses this to reject digit runs that
merely look like card numbers.
"""


def luhn(digits: str) -> bool:
    """Validate a string of decimal digits with the Luhn checksum.

    Walks the digits right to left, doubling every second digit starting
    from the second-from-right. A doubled value above 9 has 9 subtracted.
    The number is valid when the total is divisible by 10, so a string of
    zeros is valid.

    Args:
        digits: Decimal digits only, no separators.

    Returns:
        True if the checksum passes, False otherwise or if any character
        is not a decimal digit.
    """
    if not all(char.isdecimal() for char in digits):
        return False

    total = 0
    alternate = False
    for char in reversed(digits):
        n = int(char)
        if alternate:
            n *= 2
            if n > 9:
                n -= 9
        total += n
        alternate = not alternate

    return total % 10 == 0
