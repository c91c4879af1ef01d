"""
Global pytest configuration and fixtures for countdown engine tests

Provides:
- Manual clock pinned to a fixed UTC instant
- Temporary preferences file paths
- Preferences stores with a short debounce window
"""

import json
import pytest
from datetime import datetime, timezone

from deathclock.clock import ManualClock
from deathclock.preferences import PreferencesStore


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings"""
    config.addinivalue_line("markers", "unit: Unit tests")


# ============================================================================
# Clock
# ============================================================================

FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    """Reference instant shared by clock-driven tests."""
    return FIXED_NOW


@pytest.fixture
def clock():
    """Manual clock starting at FIXED_NOW."""
    return ManualClock(FIXED_NOW)


# ============================================================================
# Preferences
# ============================================================================

@pytest.fixture
def settings_path(tmp_path):
    """Path for a preferences file inside a per-test directory."""
    return tmp_path / "deathclock" / "settings.json"


@pytest.fixture
def write_settings(settings_path):
    """Factory writing raw content (dict or str) to the settings file."""
    def _write(content):
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            settings_path.write_text(content, encoding="utf-8")
        else:
            settings_path.write_text(json.dumps(content), encoding="utf-8")
        return settings_path
    return _write


@pytest.fixture
def store(settings_path, clock):
    """Store with a 50ms debounce window."""
    return PreferencesStore(settings_path, save_delay=0.05, clock=clock)


@pytest.fixture
def sample_settings():
    """Settings file content as the indicator writes it."""
    return {
        "targetDate": "2105-03-14T09:26:53.000Z",
        "unit": "weeks",
        "showUnitText": False,
        "showIcon": True,
        "numberFormat": "indian",
    }
