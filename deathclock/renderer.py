"""
deathclock/renderer.py

Builds the panel label and menu labels from computed intervals and the
current display preferences.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .clock import ensure_aware
from .formatting import NumberFormat, format_number
from .interval import Interval


class DisplayUnit(Enum):
    """Which field of the interval is shown."""
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


UNSET_TEXT = "Set Date"
EXPIRED_TEXT = "💀 Time's Up"
ICON = "⏱️ "
DATE_ICON = "📅"
CHECK_MARK = "✓ "
NO_MARK = "   "

FORMAT_LABELS = {
    NumberFormat.NONE: "No Commas",
    NumberFormat.INDIAN: "Indian (1,00,000)",
    NumberFormat.INTERNATIONAL: "International (1,000,000)",
}


def render(
    interval: Optional[Interval],
    unit: DisplayUnit = DisplayUnit.DAYS,
    number_format: NumberFormat = NumberFormat.INTERNATIONAL,
    show_icon: bool = True,
    show_unit_text: bool = True,
) -> str:
    """
    Render the countdown label.

    Args:
        interval: Computed interval, or None when no target date is known yet.
        unit: Field of the interval to show.
        number_format: Digit grouping for the value.
        show_icon: Prefix the stopwatch glyph.
        show_unit_text: Suffix the unit name.

    Returns:
        "[icon][value][ unit]", UNSET_TEXT or EXPIRED_TEXT.
    """
    if interval is None:
        return UNSET_TEXT
    if interval.is_past:
        return EXPIRED_TEXT

    unit = DisplayUnit(unit)
    icon = ICON if show_icon else ""
    unit_text = f" {unit.value}" if show_unit_text else ""
    return f"{icon}{format_number(interval.value_for(unit), number_format)}{unit_text}"


def format_target_date(target: Optional[datetime]) -> Optional[str]:
    """Return the "📅 YYYY-MM-DD" menu label for a target date, in local time."""
    if target is None:
        return None
    local = ensure_aware(target).astimezone()
    return f"{DATE_ICON} {local.strftime('%Y-%m-%d')}"


def _mark(selected: bool, label: str) -> str:
    return f"{CHECK_MARK if selected else NO_MARK}{label}"


@dataclass
class MenuState:
    """
    Snapshot of the selectable menu entries.

    Each list holds (value, label) pairs where the label carries a check
    mark for the selected entry. A presentation layer redraws from this
    after every change.
    """
    date_label: Optional[str]
    units: List[Tuple[DisplayUnit, str]] = field(default_factory=list)
    formats: List[Tuple[NumberFormat, str]] = field(default_factory=list)
    show_unit_text: str = ""
    show_icon: str = ""

    @classmethod
    def build(
        cls,
        target: Optional[datetime],
        unit: DisplayUnit,
        number_format: NumberFormat,
        show_icon: bool,
        show_unit_text: bool,
    ) -> "MenuState":
        return cls(
            date_label=format_target_date(target),
            units=[
                (u, _mark(u == unit, u.value.capitalize()))
                for u in DisplayUnit
            ],
            formats=[
                (f, _mark(f == number_format, FORMAT_LABELS[f]))
                for f in NumberFormat
            ],
            show_unit_text=_mark(show_unit_text, "Show Unit Text"),
            show_icon=_mark(show_icon, "Show Icon"),
        )
