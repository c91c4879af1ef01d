"""
deathclock/service.py

Countdown service: glues the clock, preferences store, renderer and tick
loop together for a hosting shell.

The host constructs one CountdownService when the indicator is enabled,
forwards menu/dialog events to the action methods, and awaits stop()
when it is disabled. Every action mutates preferences in memory,
re-renders, and schedules a debounced save.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .clock import SystemClock
from .dates import parse_target_date
from .errors import InvalidDateInput
from .formatting import NumberFormat
from .interval import compute_interval
from .preferences import (
    DEFAULT_SAVE_DELAY,
    DEFAULT_SETTINGS_PATH,
    Preferences,
    PreferencesStore,
)
from .renderer import DisplayUnit, MenuState, format_target_date, render
from .scheduler import TickScheduler


NOTIFY_TITLE = "Death Clock"


class CountdownService:
    """
    Live countdown indicator backed by persisted preferences.

    Args:
        config: Optional configuration dictionary
                (settings_file, debounce_seconds, tick_interval).
        clock: Clock source (default: host clock).
        store: Preferences store (default: built from config).
        on_update: Called with the label text after every re-render.
        notify: Called with (title, body) for user-facing messages.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        clock=None,
        store: Optional[PreferencesStore] = None,
        on_update: Optional[Callable[[str], None]] = None,
        notify: Optional[Callable[[str, str], None]] = None,
    ):
        self.config = config or {}
        self.clock = clock or SystemClock()
        self.logger = logging.getLogger("deathclock.service")

        # Configuration with defaults
        self.tick_interval = self.config.get("tick_interval", 1.0)
        self.store = store or PreferencesStore(
            path=self.config.get("settings_file") or DEFAULT_SETTINGS_PATH,
            save_delay=self.config.get("debounce_seconds", DEFAULT_SAVE_DELAY),
            clock=self.clock,
        )

        self.on_update = on_update
        self._notify = notify
        self.scheduler: Optional[TickScheduler] = None
        self._load_task: Optional[asyncio.Task] = None
        self.running = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """
        Start the service.

        - Renders the transient "Set Date" label
        - Starts loading preferences in the background
        - Starts the tick loop
        """
        if self.running:
            self.logger.warning("Countdown service already running")
            return

        self.running = True
        self.refresh()

        self._load_task = asyncio.create_task(self._load())
        self.scheduler = TickScheduler(
            interval=self.tick_interval,
            on_tick=self.refresh,
        )
        await self.scheduler.start()
        self.logger.info(f"Countdown service started (settings: {self.store.path})")

    async def wait_loaded(self) -> Preferences:
        """Wait for the background load started by start()."""
        if self._load_task is not None:
            await self._load_task
        return self.store.preferences

    async def stop(self) -> None:
        """
        Tear the service down.

        - Stops the tick loop
        - Abandons an unfinished load
        - Writes any pending preference change before returning
        """
        if self.scheduler:
            await self.scheduler.stop()
            self.scheduler = None

        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
            try:
                await self._load_task
            except asyncio.CancelledError:
                pass
        self._load_task = None

        await self.store.close()
        self.running = False
        self.logger.info("Countdown service stopped")

    async def _load(self) -> None:
        await self.store.load()
        self.refresh()

    # =========================================================================
    # Rendering
    # =========================================================================

    @property
    def preferences(self) -> Preferences:
        return self.store.preferences

    @property
    def text(self) -> str:
        """Current label, recomputed from the clock."""
        prefs = self.store.preferences
        interval = None
        if prefs.target_date is not None:
            interval = compute_interval(self.clock.now(), prefs.target_date)
        return render(
            interval,
            unit=prefs.unit,
            number_format=prefs.number_format,
            show_icon=prefs.show_icon,
            show_unit_text=prefs.show_unit_text,
        )

    def refresh(self) -> str:
        """Re-render and push the label to on_update."""
        text = self.text
        if self.on_update:
            self.on_update(text)
        return text

    def date_label(self) -> Optional[str]:
        return format_target_date(self.store.preferences.target_date)

    def menu_state(self) -> MenuState:
        prefs = self.store.preferences
        return MenuState.build(
            target=prefs.target_date,
            unit=prefs.unit,
            number_format=prefs.number_format,
            show_icon=prefs.show_icon,
            show_unit_text=prefs.show_unit_text,
        )

    def notify(self, body: str) -> None:
        if self._notify:
            self._notify(NOTIFY_TITLE, body)
        else:
            self.logger.info(f"{NOTIFY_TITLE}: {body}")

    # =========================================================================
    # User actions
    # =========================================================================

    def set_unit(self, unit) -> None:
        self._apply(unit=DisplayUnit(unit))

    def set_number_format(self, number_format) -> None:
        self._apply(number_format=NumberFormat(number_format))

    def toggle_unit_text(self) -> bool:
        value = not self.store.preferences.show_unit_text
        self._apply(show_unit_text=value)
        return value

    def toggle_icon(self) -> bool:
        value = not self.store.preferences.show_icon
        self._apply(show_icon=value)
        return value

    def set_target_date(self, text: str) -> datetime:
        """
        Validate user input and make it the new target.

        Like every action, this is replaced by the stored preferences if it
        runs before the initial load finishes; await wait_loaded() first.

        Args:
            text: Free-text date from the date dialog.

        Returns:
            The accepted target instant.

        Raises:
            InvalidDateInput: If rejected; preferences are left unchanged.
        """
        try:
            target = parse_target_date(text, now=self.clock.now())
        except InvalidDateInput as e:
            self.logger.info(f"Rejected target date {text!r}: {e.message}")
            self.notify(e.message)
            raise

        self._apply(target_date=target)
        self.notify(f"Date set to {target.isoformat()}")
        return target

    def _apply(self, **changes) -> None:
        self.store.mutate(**changes)
        self.refresh()
        self.store.schedule_save()
