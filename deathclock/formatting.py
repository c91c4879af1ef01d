"""
deathclock/formatting.py

Digit grouping for countdown values.

Grouping is done on the decimal string directly so output never depends
on the host locale.
"""

from enum import Enum


class NumberFormat(Enum):
    """Digit grouping schemes."""
    NONE = "none"
    INDIAN = "indian"
    INTERNATIONAL = "international"


def _group_international(digits: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return ",".join(groups)


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits

    # Last three digits, then pairs
    groups = [digits[-3:]]
    digits = digits[:-3]
    while len(digits) > 2:
        groups.insert(0, digits[-2:])
        digits = digits[:-2]
    groups.insert(0, digits)
    return ",".join(groups)


def format_number(value: int, scheme=NumberFormat.INTERNATIONAL) -> str:
    """
    Render a non-negative integer under a grouping scheme.

    Args:
        value: Magnitude to render.
        scheme: NumberFormat member or its string value.

    Returns:
        "1000000" (none), "1,000,000" (international) or "10,00,000" (indian).

    Raises:
        ValueError: If value is negative or scheme is unknown.
    """
    if value < 0:
        raise ValueError(f"Cannot format negative value: {value}")

    scheme = NumberFormat(scheme)
    digits = str(int(value))

    if scheme == NumberFormat.NONE:
        return digits
    elif scheme == NumberFormat.INDIAN:
        return _group_indian(digits)
    else:
        return _group_international(digits)
