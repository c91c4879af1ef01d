"""
tests/unit/test_cli.py

Unit tests for the command line entry point.
"""

import json
import pytest

from deathclock.__main__ import main


@pytest.fixture
def cli_config(tmp_path):
    settings = tmp_path / "settings.json"
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "settings_file": str(settings),
        "log_level": "warning",
    }), encoding="utf-8")
    return path, settings


class TestSetDate:
    """Tests for --set-date."""

    def test_accepts_future_date(self, cli_config, capsys):
        config, settings = cli_config

        assert main(["--set-date", "2100-12-31", str(config)]) == 0

        data = json.loads(settings.read_text(encoding="utf-8"))
        assert data["targetDate"].startswith("2100-12-3")
        assert data["unit"] == "days"
        assert "📅 2100-12-31" in capsys.readouterr().out

    def test_rejects_garbage(self, cli_config, capsys):
        config, settings = cli_config

        assert main(["--set-date", "not-a-date", str(config)]) == 1

        assert not settings.exists()
        assert "Invalid date format" in capsys.readouterr().out

    def test_rejects_past_and_keeps_file(self, cli_config):
        config, settings = cli_config
        settings.write_text(json.dumps({"targetDate": "2100-01-01T00:00:00Z"}), encoding="utf-8")

        assert main(["--set-date", "1999-12-31", str(config)]) == 1

        assert json.loads(settings.read_text(encoding="utf-8")) == {
            "targetDate": "2100-01-01T00:00:00Z"
        }


class TestUsage:
    """Tests for argument handling."""

    def test_missing_date(self, capsys):
        assert main(["--set-date"]) == 2
        assert "Usage" in capsys.readouterr().out

    def test_too_many_args(self, capsys):
        assert main(["a.json", "b.json"]) == 2

    def test_bad_config(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text("{broken", encoding="utf-8")

        assert main([str(path)]) == 1
        assert "Error loading config" in capsys.readouterr().out

    def test_non_mapping_section(self, tmp_path, capsys):
        """A v2 section that is not a mapping is reported, not raised."""
        path = tmp_path / "config.yaml"
        path.write_text('version: "2.0"\ncountdown: 5\n', encoding="utf-8")

        assert main([str(path)]) == 1
        assert "Error loading config" in capsys.readouterr().out
