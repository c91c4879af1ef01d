"""
deathclock/clock.py

Clock sources for the countdown engine.

Every instant handed to the engine is timezone-aware and expressed in the
host's local timezone. Naive datetimes from callers are interpreted as
local time.
"""

from datetime import datetime, timedelta
from typing import Optional


def ensure_aware(value: datetime) -> datetime:
    """
    Attach the host's local timezone to a naive datetime.

    Aware datetimes are returned unchanged.
    """
    if value.tzinfo is None:
        return value.astimezone()
    return value


class SystemClock:
    """Reads the host clock."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class ManualClock:
    """
    Clock that only moves when told to.

    Used by tests and for replaying a countdown at a fixed instant.

    Args:
        start: Initial instant (default: current host time).
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = ensure_aware(start) if start else datetime.now().astimezone()

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = ensure_aware(value)

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        """Move the clock forward and return the new instant."""
        self._now = self._now + timedelta(seconds=seconds, **kwargs)
        return self._now
