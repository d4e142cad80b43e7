"""
Tests for the Typer CLI.
"""

import json

import pendulum
import pytest
from typer.testing import CliRunner

from cabinbooking.cli.app import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"booking_store_path: {tmp_path / 'bookings.json'}\n",
        encoding="utf-8",
    )
    return path


def test_cabins_lists_catalog(config_file):
    result = runner.invoke(app, ["cabins", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "lying-1" in result.output
    assert "standing-1" in result.output
    assert "Sunday" in result.output


def test_slots_with_mock_data(config_file):
    result = runner.invoke(app, ["slots", "lying-1", "--date", "2024-11-25", "--mock", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "42 of 44 slots available" in result.output


def test_slots_converts_mock_times_to_salon_timezone(config_file):
    result = runner.invoke(
        app, ["slots", "standing-1", "--date", "2024-11-25", "--mock", "--config", str(config_file)]
    )

    assert result.exit_code == 0
    assert "43 of 44 slots available" in result.output


def test_slots_unknown_cabin(config_file):
    result = runner.invoke(app, ["slots", "sauna-1", "--mock", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "Invalid cabin id" in result.output


def test_slots_without_webhook_reports_error(config_file):
    result = runner.invoke(app, ["slots", "lying-1", "--date", "2024-11-25", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "No calendar webhook" in result.output


def test_slots_bad_date(config_file):
    result = runner.invoke(app, ["slots", "lying-1", "--date", "25.11.2024", "--mock", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "Could not parse date" in result.output


def test_book_requires_notification_url_outside_mock_mode(config_file):
    result = runner.invoke(app, ["book", "lying-1", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "notification_url" in result.output


def test_book_cancel_and_list_in_mock_mode(config_file, tmp_path):
    result = runner.invoke(
        app,
        [
            "book", "lying-1",
            "--date", _today_in_vilnius(),
            "--time", "13:00",
            "--name", "Jonas Jonaitis",
            "--email", "jonas@example.com",
            "--user-id", "user-1",
            "--mock",
            "--config", str(config_file),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Booking confirmed" in result.output

    stored = json.loads((tmp_path / "bookings.json").read_text(encoding="utf-8"))["bookings"]
    (booking_id, record), = stored.items()
    assert record["status"] == "confirmed"
    assert record["userId"] == "user-1"

    result = runner.invoke(app, ["cancel", booking_id, "lying-1", "--mock", "--config", str(config_file)])
    assert result.exit_code == 0

    result = runner.invoke(app, ["bookings", "--user", "user-1", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "cancelled" in result.output


def _today_in_vilnius() -> str:
    return pendulum.today("Europe/Vilnius").format("YYYY-MM-DD")


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "cabinbooking" in result.output


def test_bookings_for_user_without_bookings(config_file):
    result = runner.invoke(app, ["bookings", "--user", "nobody", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "No bookings found for nobody" in result.output
