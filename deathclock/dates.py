"""
deathclock/dates.py

Parsing and validation of user-entered target dates.

Supported formats:
- "2100-12-31" (local midnight)
- "2100-12-31 20:00" or "2100-12-31 20:00:00"
- "2100-12-31T20:00:00", with optional offset ("+05:30", "Z")
- "12/31/2100" or "12/31/2100 20:00" (US format: MM/DD/YYYY)
- "tomorrow" or "tomorrow 14:00"
- "in 2 hours", "in 3 months", "in 40 years"
- "2 hours", "40 years" (shorthand)

Times without an explicit offset are host-local.
"""

import re
from datetime import datetime, timedelta
from typing import Optional

from .clock import ensure_aware
from .errors import InvalidDateInput
from .interval import add_months


INVALID_FORMAT = "Invalid date format"
NOT_IN_FUTURE = "Date must be in the future"

# Patterns for relative time parsing
RELATIVE_PATTERNS = [
    # "in 2 hours", "in 30 minutes", "in 1 year"
    (r"^in\s+(\d+)\s+(second|minute|hour|day|week|month|year)s?$", "relative"),
    # "2 hours", "30 minutes" (without "in")
    (r"^(\d+)\s+(second|minute|hour|day|week|month|year)s?$", "relative"),
    # "tomorrow", "tomorrow 14:00"
    (r"^tomorrow(?:\s+(\d{1,2}):(\d{2}))?$", "tomorrow"),
]

# Patterns for absolute datetime parsing
DATETIME_PATTERNS = [
    # "2100-12-31"
    (r"^(\d{4})-(\d{2})-(\d{2})$", "date"),
    # "2100-12-31 20:00" or "2100-12-31 20:00:00"
    (r"^(\d{4})-(\d{2})-(\d{2})\s+(\d{1,2}):(\d{2})(?::(\d{2}))?$", "datetime"),
    # "12/31/2100" or "12/31/2100 20:00" (US format)
    (r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+(\d{1,2}):(\d{2}))?$", "datetime_us"),
]

# Fixed-length units (in seconds); months and years step the calendar
TIME_UNITS = {
    "second": 1,
    "minute": 60,
    "hour": 3600,
    "day": 86400,
    "week": 604800,
}

CALENDAR_UNITS = {
    "month": 1,
    "year": 12,
}


def _shift(now: datetime, amount: int, unit: str) -> datetime:
    if unit in CALENDAR_UNITS:
        shifted = add_months(now, amount * CALENDAR_UNITS[unit])
        if shifted is None:
            raise ValueError(f"{amount} {unit}s is out of range")
        return shifted
    return now + timedelta(seconds=amount * TIME_UNITS[unit])


def parse_datetime(text: str, now: Optional[datetime] = None) -> datetime:
    """
    Parse user input into an aware datetime.

    Args:
        text: User input representing a point in time.
        now: Reference instant for relative forms (default: host time).

    Returns:
        Aware datetime; host-local unless the input carried an offset.

    Raises:
        ValueError: If the format is not recognized or values are invalid.
    """
    text = text.strip().lower()
    now = ensure_aware(now) if now else datetime.now().astimezone()

    # Try relative patterns first
    for pattern, pattern_type in RELATIVE_PATTERNS:
        match = re.match(pattern, text)
        if not match:
            continue

        if pattern_type == "relative":
            return _shift(now, int(match.group(1)), match.group(2))

        tomorrow = now + timedelta(days=1)
        if match.group(1) and match.group(2):
            # "tomorrow 14:00"
            return tomorrow.replace(
                hour=int(match.group(1)),
                minute=int(match.group(2)),
                second=0,
                microsecond=0,
            )
        return tomorrow.replace(second=0, microsecond=0)

    # Try absolute datetime patterns
    for pattern, pattern_type in DATETIME_PATTERNS:
        match = re.match(pattern, text)
        if not match:
            continue

        groups = match.groups()
        if pattern_type == "datetime_us":
            month, day, year = int(groups[0]), int(groups[1]), int(groups[2])
            hour = int(groups[3]) if groups[3] else 0
            minute = int(groups[4]) if groups[4] else 0
            second = 0
        else:
            year, month, day = int(groups[0]), int(groups[1]), int(groups[2])
            hour = int(groups[3]) if pattern_type == "datetime" else 0
            minute = int(groups[4]) if pattern_type == "datetime" else 0
            second = int(groups[5]) if pattern_type == "datetime" and groups[5] else 0

        try:
            return ensure_aware(datetime(year, month, day, hour, minute, second))
        except ValueError as e:
            raise ValueError(f"Invalid date/time values: {e}") from e

    # Full ISO-8601, including "T" separator and offsets
    try:
        return ensure_aware(datetime.fromisoformat(text.upper().replace("Z", "+00:00")))
    except ValueError:
        pass

    raise ValueError(
        f"Couldn't parse '{text}'. "
        "Try: '2100-12-31', '2100-12-31 20:00', or 'in 40 years'"
    )


def parse_target_date(text: str, now: Optional[datetime] = None) -> datetime:
    """
    Parse and validate a new countdown target.

    Args:
        text: User input.
        now: Instant the target must lie strictly after (default: host time).

    Returns:
        The accepted target instant.

    Raises:
        InvalidDateInput: If unparseable or not strictly in the future.
    """
    now = ensure_aware(now) if now else datetime.now().astimezone()

    try:
        target = parse_datetime(text, now=now)
    except (ValueError, OverflowError) as e:
        raise InvalidDateInput(INVALID_FORMAT, text=text) from e

    if target <= now:
        raise InvalidDateInput(NOT_IN_FUTURE, text=text)
    return target
