"""
deathclock/interval.py

Remaining-time decomposition between two instants.

Seconds through weeks are plain integer divisions of the raw duration
(a day is always 86400 seconds). Months and years are counted by stepping
a calendar cursor forward from the start instant, so month lengths and
leap years are respected.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .clock import ensure_aware


@dataclass(frozen=True)
class Interval:
    """
    Time remaining until a target instant.

    Attributes:
        seconds: Whole seconds remaining.
        minutes: seconds // 60.
        hours: minutes // 60.
        days: hours // 24.
        weeks: days // 7.
        months: Whole calendar months remaining (years * 12 + residual).
        years: Whole calendar years remaining.
        is_past: True once the target has been reached. All counts are 0.
    """
    seconds: int = 0
    minutes: int = 0
    hours: int = 0
    days: int = 0
    weeks: int = 0
    months: int = 0
    years: int = 0
    is_past: bool = False

    def value_for(self, unit) -> int:
        """Return the count for a DisplayUnit (or its string value)."""
        name = getattr(unit, "value", unit)
        if name not in UNIT_FIELDS:
            raise ValueError(f"Unknown display unit: {unit!r}")
        return getattr(self, name)


UNIT_FIELDS = ("seconds", "minutes", "hours", "days", "weeks", "months", "years")

EXPIRED = Interval(is_past=True)


def add_months(value: datetime, months: int) -> Optional[datetime]:
    """
    Shift a datetime by whole calendar months.

    The day of month is clamped to the length of the landing month, so
    Jan 31 + 1 month is the last day of February.

    Returns:
        The shifted datetime, or None if it falls outside the datetime range.
    """
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    if not 1 <= year <= 9999:
        return None
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _count_steps(start: datetime, target: datetime, months_per_step: int) -> int:
    """
    Count whole calendar steps from start that do not pass target.

    Step k lands on start shifted by k * months_per_step months. A step that
    lands exactly on target is counted.
    """
    count = 0
    cursor = start
    while cursor < target:
        cursor = add_months(start, (count + 1) * months_per_step)
        if cursor is not None and cursor <= target:
            count += 1
        else:
            break
    return count


def compute_interval(now: datetime, target: datetime) -> Interval:
    """
    Decompose the time remaining from now until target.

    Args:
        now: Current instant. Naive values are taken as local time.
        target: Instant being counted down to.

    Returns:
        Interval with every field filled in, or EXPIRED when target <= now.
    """
    now = ensure_aware(now)
    target = ensure_aware(target)

    if target <= now:
        return EXPIRED

    delta = target - now
    seconds = delta.days * 86400 + delta.seconds
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    weeks = days // 7

    years = _count_steps(now, target, 12)
    year_mark = add_months(now, years * 12)
    months = _count_steps(year_mark, target, 1)

    return Interval(
        seconds=seconds,
        minutes=minutes,
        hours=hours,
        days=days,
        weeks=weeks,
        months=years * 12 + months,
        years=years,
        is_past=False,
    )
