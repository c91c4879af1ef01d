"""
tests/unit/test_service.py

Unit tests for CountdownService.

Tests cover:
- Startup label before and after preferences load
- User actions (unit, format, flags, target date)
- Date rejection leaves state unchanged
- Teardown flushes pending saves
"""

import json
import pytest
from datetime import timedelta
from unittest.mock import MagicMock

from deathclock.dates import INVALID_FORMAT, NOT_IN_FUTURE
from deathclock.errors import InvalidDateInput
from deathclock.formatting import NumberFormat
from deathclock.preferences import PreferencesStore
from deathclock.renderer import EXPIRED_TEXT, UNSET_TEXT, DisplayUnit
from deathclock.service import NOTIFY_TITLE, CountdownService


@pytest.fixture
def slow_store(settings_path, clock):
    """Store whose debounce window never elapses during a test."""
    return PreferencesStore(settings_path, save_delay=30.0, clock=clock)


@pytest.fixture
def service(slow_store, clock):
    return CountdownService(
        config={"tick_interval": 0.05},
        clock=clock,
        store=slow_store,
        on_update=MagicMock(),
        notify=MagicMock(),
    )


@pytest.fixture
def loaded_service(service, fixed_now):
    """Service whose store already holds a target 10 days out."""
    service.store.preferences.target_date = fixed_now + timedelta(days=10, hours=1)
    service.store.loaded = True
    return service


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


# =============================================================================
# Lifecycle
# =============================================================================

class TestLifecycle:
    """Tests for start/stop."""

    @pytest.mark.asyncio
    async def test_unset_until_loaded(self, service):
        """The first label is the unset sentinel; the loaded one counts down."""
        await service.start()
        first = service.on_update.call_args_list[0].args[0]
        await service.wait_loaded()

        assert first == UNSET_TEXT
        assert service.text == "⏱️ 29,219 days"

        await service.stop()

    @pytest.mark.asyncio
    async def test_loads_saved_preferences(self, service, write_settings, sample_settings):
        write_settings(sample_settings)

        await service.start()
        await service.wait_loaded()

        assert service.preferences.unit == DisplayUnit.WEEKS
        assert "weeks" not in service.text  # showUnitText is off

        await service.stop()

    @pytest.mark.asyncio
    async def test_stop_flushes_pending_save(self, service, settings_path):
        await service.start()
        await service.wait_loaded()
        service.set_unit(DisplayUnit.HOURS)

        assert service.store.pending is True
        assert not settings_path.exists()

        await service.stop()

        assert read_json(settings_path)["unit"] == "hours"
        assert service.running is False
        assert service.scheduler is None

    @pytest.mark.asyncio
    async def test_action_after_load_survives(self, service, write_settings, sample_settings, settings_path):
        """Waiting for the load before acting keeps the change over the stored file."""
        write_settings(sample_settings)
        await service.start()
        await service.wait_loaded()

        target = service.set_target_date("2100-12-31")
        await service.stop()

        assert service.preferences.target_date == target
        assert service.preferences.unit == DisplayUnit.WEEKS
        assert read_json(settings_path)["targetDate"].startswith("2100-12-3")

    @pytest.mark.asyncio
    async def test_double_start(self, service):
        await service.start()
        scheduler = service.scheduler

        await service.start()

        assert service.scheduler is scheduler
        await service.stop()

    def test_builds_store_from_config(self, tmp_path):
        service = CountdownService(config={
            "settings_file": tmp_path / "prefs.json",
            "debounce_seconds": 2.5,
        })

        assert service.store.path == tmp_path / "prefs.json"
        assert service.store.save_delay == 2.5
        assert service.tick_interval == 1.0


# =============================================================================
# Rendering
# =============================================================================

class TestRendering:
    """Tests for the live label."""

    def test_text_tracks_clock(self, loaded_service, clock):
        assert loaded_service.text == "⏱️ 10 days"

        clock.advance(hours=2)
        assert loaded_service.text == "⏱️ 9 days"

        clock.advance(days=30)
        assert loaded_service.text == EXPIRED_TEXT

    def test_refresh_is_idempotent(self, loaded_service):
        """Repeated ticks only re-render."""
        results = {loaded_service.refresh() for _ in range(3)}

        assert results == {"⏱️ 10 days"}
        assert loaded_service.store.pending is False

    def test_date_label(self, loaded_service, fixed_now):
        expected = (fixed_now + timedelta(days=10, hours=1)).astimezone().strftime("%Y-%m-%d")
        assert loaded_service.date_label() == f"📅 {expected}"

    @pytest.mark.asyncio
    async def test_menu_state(self, loaded_service):
        loaded_service.set_number_format(NumberFormat.NONE)
        loaded_service.store.flush()

        state = loaded_service.menu_state()

        assert dict(state.formats)[NumberFormat.NONE] == "✓ No Commas"
        assert dict(state.units)[DisplayUnit.DAYS] == "✓ Days"


# =============================================================================
# User Actions
# =============================================================================

class TestActions:
    """Tests for menu and dialog actions."""

    @pytest.mark.asyncio
    async def test_set_unit(self, loaded_service):
        loaded_service.set_unit("hours")

        assert loaded_service.preferences.unit == DisplayUnit.HOURS
        assert loaded_service.on_update.call_args.args[0] == "⏱️ 241 hours"
        assert loaded_service.store.pending is True
        loaded_service.store.flush()

    @pytest.mark.asyncio
    async def test_set_number_format(self, loaded_service):
        loaded_service.set_unit(DisplayUnit.SECONDS)
        loaded_service.set_number_format("indian")

        assert loaded_service.text == "⏱️ 8,67,600 seconds"
        loaded_service.store.flush()

    @pytest.mark.asyncio
    async def test_toggles(self, loaded_service):
        assert loaded_service.toggle_icon() is False
        assert loaded_service.text == "10 days"

        assert loaded_service.toggle_unit_text() is False
        assert loaded_service.text == "10"

        assert loaded_service.toggle_icon() is True
        assert loaded_service.text == "⏱️ 10"
        loaded_service.store.flush()

    @pytest.mark.asyncio
    async def test_burst_of_actions_writes_once(self, loaded_service, settings_path):
        """Several clicks in a row coalesce into a single write."""
        loaded_service.set_unit("minutes")
        loaded_service.toggle_icon()
        loaded_service.set_number_format("none")

        assert loaded_service.store.flush() is True
        assert loaded_service.store.flush() is False

        data = read_json(settings_path)
        assert data["unit"] == "minutes"
        assert data["showIcon"] is False
        assert data["numberFormat"] == "none"

    @pytest.mark.asyncio
    async def test_set_target_date(self, loaded_service):
        target = loaded_service.set_target_date("2100-12-31")

        assert loaded_service.preferences.target_date == target
        assert target.year == 2100
        loaded_service._notify.assert_called_once_with(
            NOTIFY_TITLE, f"Date set to {target.isoformat()}"
        )
        assert loaded_service.store.pending is True
        loaded_service.store.flush()

    @pytest.mark.parametrize("text, message", [
        ("not-a-date", INVALID_FORMAT),
        ("2000-01-01", NOT_IN_FUTURE),
    ])
    def test_rejected_date_leaves_state(self, loaded_service, text, message):
        before = loaded_service.preferences.target_date

        with pytest.raises(InvalidDateInput):
            loaded_service.set_target_date(text)

        assert loaded_service.preferences.target_date == before
        assert loaded_service.store.pending is False
        loaded_service._notify.assert_called_once_with(NOTIFY_TITLE, message)

    def test_notify_without_callback_logs(self, slow_store, clock, caplog):
        service = CountdownService(clock=clock, store=slow_store)

        with caplog.at_level("INFO", logger="deathclock.service"):
            service.notify("hello")

        assert "hello" in caplog.text
