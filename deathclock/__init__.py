"""
deathclock/__init__.py

Persistent countdown engine.

Provides:
- Calendar-aware remaining-time decomposition
- Locale-independent digit grouping (none, indian, international)
- Label and menu rendering
- Preferences persisted as JSON with debounced, atomic writes
- An asyncio service tying it all to a once-per-second tick
"""

from .clock import ManualClock, SystemClock
from .dates import parse_datetime, parse_target_date
from .errors import (
    ConfigError,
    DeathClockError,
    InvalidDateInput,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
)
from .formatting import NumberFormat, format_number
from .interval import Interval, compute_interval
from .preferences import Preferences, PreferencesStore
from .renderer import DisplayUnit, MenuState, render
from .scheduler import TickScheduler
from .service import CountdownService

__version__ = "1.0.0"

__all__ = [
    "ConfigError",
    "CountdownService",
    "DeathClockError",
    "DisplayUnit",
    "Interval",
    "InvalidDateInput",
    "ManualClock",
    "MenuState",
    "NumberFormat",
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "Preferences",
    "PreferencesStore",
    "SystemClock",
    "TickScheduler",
    "compute_interval",
    "format_number",
    "parse_datetime",
    "parse_target_date",
    "render",
]
