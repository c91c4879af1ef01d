"""
deathclock/preferences.py

Persisted display preferences with debounced, atomic writes.

The store keeps one Preferences object in memory. Mutations apply to it
immediately; writes to the backing JSON file are coalesced through a
single re-armable timer on the running asyncio loop, so a burst of menu
clicks produces one write.

File format (all keys optional on read, all written):
    {
        "targetDate": "2105-03-14T09:26:53Z",
        "unit": "days",
        "showUnitText": true,
        "showIcon": true,
        "numberFormat": "international"
    }
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .clock import SystemClock, ensure_aware
from .errors import PersistenceReadError, PersistenceWriteError
from .formatting import NumberFormat
from .interval import add_months
from .renderer import DisplayUnit


# Seconds to wait after the last mutation before writing
DEFAULT_SAVE_DELAY = 1.0

# Default countdown length when no target date is stored
DEFAULT_LIFESPAN_YEARS = 80

DEFAULT_SETTINGS_PATH = Path.home() / ".deathclock" / "settings.json"


def default_target_date(now: datetime) -> datetime:
    """Target used when none is stored: DEFAULT_LIFESPAN_YEARS after now."""
    return add_months(ensure_aware(now), DEFAULT_LIFESPAN_YEARS * 12)


def _format_timestamp(value: datetime) -> str:
    utc = ensure_aware(value).astimezone(timezone.utc)
    return utc.isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime:
    return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))


@dataclass
class Preferences:
    """
    Everything the countdown persists.

    Attributes:
        target_date: Instant being counted down to (None until loaded).
        unit: Interval field shown in the label.
        number_format: Digit grouping for the shown value.
        show_unit_text: Append the unit name to the label.
        show_icon: Prefix the label with the stopwatch glyph.
    """
    target_date: Optional[datetime] = None
    unit: DisplayUnit = DisplayUnit.DAYS
    number_format: NumberFormat = NumberFormat.INTERNATIONAL
    show_unit_text: bool = True
    show_icon: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the on-disk JSON mapping.

        Returns:
            Dictionary with every file key present.
        """
        return {
            "targetDate": (
                _format_timestamp(self.target_date) if self.target_date else None
            ),
            "unit": self.unit.value,
            "showUnitText": self.show_unit_text,
            "showIcon": self.show_icon,
            "numberFormat": self.number_format.value,
        }

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], logger: Optional[logging.Logger] = None
    ) -> "Preferences":
        """
        Build Preferences from a parsed file, field by field.

        Missing keys take their default silently. Keys holding a value of
        the wrong shape also take their default, and are logged.

        Args:
            data: Parsed JSON object.
            logger: Where to report rejected values.

        Returns:
            Preferences with every field defined (target_date may be None).
        """
        prefs = cls()
        rejected = []

        raw = data.get("targetDate")
        if raw is not None:
            try:
                prefs.target_date = _parse_timestamp(raw)
            except (TypeError, ValueError, AttributeError):
                rejected.append("targetDate")

        raw = data.get("unit")
        if raw is not None:
            try:
                prefs.unit = DisplayUnit(raw)
            except ValueError:
                rejected.append("unit")

        raw = data.get("numberFormat")
        if raw is not None:
            try:
                prefs.number_format = NumberFormat(raw)
            except ValueError:
                rejected.append("numberFormat")

        for key, attr in (("showUnitText", "show_unit_text"), ("showIcon", "show_icon")):
            raw = data.get(key)
            if raw is None:
                continue
            if isinstance(raw, bool):
                setattr(prefs, attr, raw)
            else:
                rejected.append(key)

        if rejected and logger:
            logger.warning(
                f"Ignoring invalid preference values: {', '.join(rejected)}"
            )
        return prefs


class PreferencesStore:
    """
    Owns the Preferences aggregate and its backing file.

    Only one load should be in flight per store; callers serialize that.
    Writes are serialized internally, so at most one is in flight. Every
    snapshot is numbered, and a snapshot older than the one already on
    disk is discarded instead of replacing it.

    Args:
        path: Backing JSON file.
        save_delay: Default debounce window in seconds.
        clock: Clock used to synthesize the default target date.
    """

    def __init__(
        self,
        path=DEFAULT_SETTINGS_PATH,
        save_delay: float = DEFAULT_SAVE_DELAY,
        clock=None,
    ):
        self.path = Path(path)
        self.save_delay = save_delay
        self.clock = clock or SystemClock()
        self.preferences = Preferences()
        self.loaded = False
        self._save_handle: Optional[asyncio.TimerHandle] = None
        self._save_task: Optional[asyncio.Task] = None
        self._write_lock = asyncio.Lock()
        self._file_lock = threading.Lock()
        self._snapshot_seq = 0
        self._written_seq = 0
        self.logger = logging.getLogger("deathclock.preferences")

    @property
    def pending(self) -> bool:
        """True while a debounced save is armed and has not fired."""
        return self._save_handle is not None

    # =========================================================================
    # Load
    # =========================================================================

    async def load(self) -> Preferences:
        """
        Read preferences from disk without blocking the event loop.

        Never raises. Unreadable files and invalid values fall back to
        defaults; a missing target date becomes default_target_date(now).

        Returns:
            The loaded Preferences (also available as self.preferences).
        """
        data: Dict[str, Any] = {}
        try:
            data = await asyncio.to_thread(self._read_file)
        except PersistenceReadError as e:
            if isinstance(e.__cause__, FileNotFoundError):
                self.logger.info(f"No preferences file at {self.path}, using defaults")
            else:
                self.logger.warning(f"Using default preferences: {e}")

        prefs = Preferences.from_dict(data, self.logger)
        if prefs.target_date is None:
            prefs.target_date = default_target_date(self.clock.now())

        self.preferences = prefs
        self.loaded = True
        self.logger.debug(f"Preferences loaded: {prefs}")
        return prefs

    def _read_file(self) -> Dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceReadError(
                f"Cannot read {self.path}: {e}", path=self.path
            ) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PersistenceReadError(
                f"Malformed JSON in {self.path}: {e}", path=self.path
            ) from e

        if not isinstance(data, dict):
            raise PersistenceReadError(
                f"Expected a JSON object in {self.path}, got {type(data).__name__}",
                path=self.path,
            )
        return data

    # =========================================================================
    # Mutate
    # =========================================================================

    def mutate(self, **changes) -> Preferences:
        """
        Apply a shallow update to the in-memory preferences.

        Visible to readers immediately; nothing is written to disk.

        Raises:
            TypeError: If a keyword is not a Preferences field.
        """
        names = {f.name for f in fields(Preferences)}
        unknown = set(changes) - names
        if unknown:
            raise TypeError(f"Unknown preference fields: {', '.join(sorted(unknown))}")

        for name, value in changes.items():
            if name == "unit":
                value = DisplayUnit(value)
            elif name == "number_format":
                value = NumberFormat(value)
            elif name == "target_date" and value is not None:
                value = ensure_aware(value)
            elif name in ("show_unit_text", "show_icon"):
                value = bool(value)
            setattr(self.preferences, name, value)

        return self.preferences

    # =========================================================================
    # Save
    # =========================================================================

    def schedule_save(self, delay: Optional[float] = None) -> None:
        """
        Arm (or re-arm) the debounced save.

        Cancels any armed, unfired timer and starts the window again, so
        calls closer together than the window collapse into one write.
        Must be called from within the running event loop.

        Args:
            delay: Window in seconds (default: self.save_delay).
        """
        if delay is None:
            delay = self.save_delay

        loop = asyncio.get_running_loop()
        if self._save_handle is not None:
            self._save_handle.cancel()
        self._save_handle = loop.call_later(delay, self._on_save_timer)

    def _on_save_timer(self) -> None:
        self._save_handle = None
        self._save_task = asyncio.ensure_future(self.save())

    async def save(self) -> bool:
        """
        Write the current preferences to disk atomically.

        Serializes against other writes from this store. The snapshot is
        taken once the write slot is acquired, so a queued save always
        writes the newest state. Failures are logged, never raised.

        Returns:
            True if the file was replaced.
        """
        async with self._write_lock:
            data, seq = self._snapshot()
            try:
                written = await asyncio.to_thread(self._write_file, data, seq)
            except PersistenceWriteError as e:
                self.logger.error(f"Failed to save preferences: {e}")
                return False

        if written:
            self.logger.debug(f"Preferences saved to {self.path}")
        else:
            self.logger.debug("Discarded save superseded by a newer write")
        return written

    def flush(self) -> bool:
        """
        Perform a pending debounced save right now, synchronously.

        Cancels the armed timer so the state is written exactly once.
        Does nothing when no save is pending.

        Returns:
            True if a pending save was written.
        """
        if self._save_handle is None:
            return False

        self._save_handle.cancel()
        self._save_handle = None

        data, seq = self._snapshot()
        try:
            self._write_file(data, seq)
        except PersistenceWriteError as e:
            self.logger.error(f"Failed to flush preferences: {e}")
            return False

        self.logger.debug(f"Preferences flushed to {self.path}")
        return True

    async def close(self) -> None:
        """
        Teardown: let an in-flight write finish, then flush a pending one.

        Waiting first keeps an older in-flight snapshot from landing on
        disk after the flushed state.
        """
        while self._save_task is not None and not self._save_task.done():
            await self._save_task
        self._save_task = None
        self.flush()

    def _snapshot(self):
        self._snapshot_seq += 1
        return self.preferences.to_dict(), self._snapshot_seq

    def _write_file(self, data: Dict[str, Any], seq: int) -> bool:
        """
        Write one snapshot through a temp file and rename it into place.

        Runs in a worker thread for save() and on the loop thread for
        flush(). The rename is guarded by a thread lock, and a snapshot
        numbered below the last one written is dropped.

        Returns:
            True if the file was replaced, False if the snapshot was stale.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise PersistenceWriteError(
                f"Cannot create temp file for {self.path}: {e}", path=self.path
            ) from e

        try:
            with open(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            with self._file_lock:
                if seq < self._written_seq:
                    Path(tmp_path).unlink(missing_ok=True)
                    return False
                os.replace(tmp_path, self.path)
                self._written_seq = seq
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise PersistenceWriteError(
                f"Cannot write {self.path}: {e}", path=self.path
            ) from e
        return True
