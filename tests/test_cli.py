"""
Tests for the command line interface.
"""

import pytest
from rich.console import Console
from typer.testing import CliRunner

from careslots import __version__
from careslots.adapters.json_repository import JsonFileAvailabilityRepository
from careslots.cli import app as cli_app

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep table rows on one line and leave global logging alone."""
    monkeypatch.setattr(cli_app, "console", Console(width=200))
    monkeypatch.setattr(cli_app, "configure_logging", lambda level: None)


@pytest.fixture
def config_path(tmp_path, availability, make_slot):
    availability.add_time_slot(make_slot("tue", "2024-11-26 09:00", "2024-11-26 10:00"))
    JsonFileAvailabilityRepository(tmp_path / "data").save(availability)

    path = tmp_path / "config.yaml"
    path.write_text("timezone: Europe/Berlin\ndata_dir: data\n", encoding="utf-8")
    return path


def invoke(*args):
    return runner.invoke(cli_app.app, [str(arg) for arg in args])


class TestSlotsCommand:
    """Tests for `careslots slots`."""

    def test_lists_generated_and_held_slots(self, config_path):
        result = invoke("slots", "prov-1", "--start", "2024-11-25", "--end", "2024-12-01", "-c", config_path)

        assert result.exit_code == 0
        assert "sched-mon:2024-11-25:physical_therapy:0900" in result.output
        assert "09:00 - 10:00" in result.output
        assert "tue" in result.output
        assert "Physical Therapy" in result.output

    def test_empty_result(self, config_path):
        result = invoke(
            "slots", "prov-1", "--start", "2024-11-25", "--end", "2024-12-01", "-s", "counseling", "-c", config_path
        )

        assert result.exit_code == 0
        assert "Keine freien Termine" in result.output

    def test_unknown_provider(self, config_path):
        result = invoke("slots", "nobody", "--start", "2024-11-25", "-c", config_path)

        assert result.exit_code == 1
        assert "Fehler" in result.output

    def test_unknown_service_type(self, config_path):
        result = invoke("slots", "prov-1", "-s", "yoga", "-c", config_path)

        assert result.exit_code == 1
        assert "Unbekannter Service-Typ" in result.output

    def test_missing_explicit_config(self, tmp_path):
        result = invoke("slots", "prov-1", "-c", tmp_path / "nope.yaml")

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestCheckCommand:
    """Tests for `careslots check`."""

    def test_available_window(self, config_path):
        result = invoke("check", "prov-1", "2024-11-25T09:00", "2024-11-25T10:00", "physical_therapy", "-c", config_path)

        assert result.exit_code == 0
        assert "Verfügbar" in result.output

    def test_unavailable_window(self, config_path):
        result = invoke("check", "prov-1", "2024-11-26T14:00", "2024-11-26T15:00", "physical_therapy", "-c", config_path)

        assert result.exit_code == 1
        assert "Nicht verfügbar" in result.output


class TestBookingCommands:
    """Tests for `careslots book` and `careslots unbook`."""

    def test_book_then_double_book(self, config_path):
        first = invoke("book", "prov-1", "tue", "b-1", "-c", config_path)
        second = invoke("book", "prov-1", "tue", "b-2", "-c", config_path)

        assert first.exit_code == 0
        assert "gebucht" in first.output
        assert second.exit_code == 1
        assert "konnte nicht gebucht werden" in second.output

    def test_book_persists_to_data_dir(self, config_path, tmp_path):
        invoke("book", "prov-1", "tue", "b-1", "-c", config_path)

        stored = JsonFileAvailabilityRepository(tmp_path / "data").get("prov-1")
        assert stored.get_time_slot("tue").booking_id == "b-1"

    def test_unbook(self, config_path):
        assert invoke("unbook", "prov-1", "tue", "-c", config_path).exit_code == 1

        invoke("book", "prov-1", "tue", "b-1", "-c", config_path)
        result = invoke("unbook", "prov-1", "tue", "-c", config_path)

        assert result.exit_code == 0
        assert "freigegeben" in result.output


class TestInfoCommands:
    """Tests for the informational commands."""

    def test_providers(self, config_path):
        result = invoke("providers", "physical_therapy", "--start", "2024-11-25", "--end", "2024-12-01", "-c", config_path)

        assert result.exit_code == 0
        assert "prov-1" in result.output

    def test_providers_none_found(self, config_path):
        result = invoke("providers", "respite_care", "--start", "2024-11-25", "--end", "2024-12-01", "-c", config_path)

        assert result.exit_code == 0
        assert "Keine Anbieter" in result.output

    def test_validate(self, config_path):
        result = invoke("validate", "prov-1", "-c", config_path)

        assert result.exit_code == 0
        assert "1 Slots" in result.output
        assert "1 Zeitpläne" in result.output

    def test_data_dir_override(self, config_path, tmp_path):
        result = invoke("validate", "prov-1", "-c", config_path, "--data-dir", tmp_path / "empty")

        assert result.exit_code == 1

    def test_service_types(self):
        result = invoke("service-types")

        assert result.exit_code == 0
        assert "physical_therapy" in result.output
        assert "respite_care" in result.output
        assert "240" in result.output

    def test_version(self):
        result = invoke("version")

        assert result.exit_code == 0
        assert __version__ in result.output
