"""Tests for the CLI."""

import json
import os
from datetime import datetime, timezone
from unittest.mock import patch, MagicMock

import pytest
from click.testing import CliRunner

from nextup.cli import main
from nextup.config import Config
from nextup.core.calendar import CalendarInfo, EventInstance
from nextup.ports.calendar_source import DataSourceUnavailable

UTC = timezone.utc


def ms(*args) -> int:
    return int(datetime(*args, tzinfo=UTC).timestamp() * 1000)


NOW = ms(2025, 1, 10, 9, 0)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config(tmp_path):
    return Config(timezone="UTC", selection_file=str(tmp_path / "prefs.json"))


@pytest.fixture
def source():
    source = MagicMock()
    source.has_read_permission.return_value = True
    source.query_instances.return_value = []
    source.list_calendars.return_value = [CalendarInfo("1", "Work"), CalendarInfo("2", "Home")]
    return source


@pytest.fixture(autouse=True)
def wiring(config, source):
    with patch("nextup.cli.load_config", return_value=config), \
         patch("nextup.cli._source", return_value=source), \
         patch("nextup.cli._now_millis", return_value=NOW), \
         patch("nextup.cli._monotonic_millis", return_value=5000):
        yield


def event(start: int, end: int, title: str, all_day: bool = False) -> EventInstance:
    return EventInstance(id=start, title=title, start_millis=start, end_millis=end, all_day=all_day, calendar_id="1")


class TestAgendaCommand:
    def test_text_output(self, runner, source):
        source.query_instances.return_value = [
            event(ms(2025, 1, 10, 0), ms(2025, 1, 11, 0), "Holiday", all_day=True),
            event(ms(2025, 1, 10, 8, 30), ms(2025, 1, 10, 9, 30), "Standup"),
            event(ms(2025, 1, 11, 14), ms(2025, 1, 11, 15), "Lunch"),
        ]

        result = runner.invoke(main, ["agenda"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "### Today"
        assert "All Day" in lines[1] and "Holiday" in lines[1] and "%" not in lines[1]
        assert "08:30" in lines[2] and "50%" in lines[2]
        assert "### Tomorrow" in lines

    def test_json_output(self, runner, source):
        source.query_instances.return_value = [event(ms(2025, 1, 10, 10), ms(2025, 1, 10, 11), "Review")]

        result = runner.invoke(main, ["agenda", "--json"])

        data = json.loads(result.output)
        assert data["status"] == "ok"
        assert data["entries"][0] == {"type": "header", "label": "Today", "anchor_millis": ms(2025, 1, 10, 10)}
        assert data["entries"][1]["event"]["title"] == "Review"
        assert data["entries"][1]["progress"] == 0

    def test_empty(self, runner):
        result = runner.invoke(main, ["agenda"])
        assert result.exit_code == 0
        assert "No events scheduled." in result.output

    def test_error(self, runner, source):
        source.query_instances.side_effect = DataSourceUnavailable("offline")
        result = runner.invoke(main, ["agenda"])
        assert result.exit_code == 1
        assert "Error: offline" in result.output

    def test_permission(self, runner, source):
        source.has_read_permission.return_value = False
        result = runner.invoke(main, ["agenda"])
        assert result.exit_code == 1
        assert "Permission Needed" in result.output


class TestNextCommand:
    def test_text_output(self, runner, source):
        source.query_instances.return_value = [event(NOW + 90 * 60000, NOW + 120 * 60000, "Dentist")]

        result = runner.invoke(main, ["next"])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["Dentist", "Fri, 10:30", "in 1:30:00"]

    def test_json_includes_trigger(self, runner, source):
        source.query_instances.return_value = [event(NOW + 10000 * 60, NOW + 20000 * 60, "Call")]

        result = runner.invoke(main, ["next", "--json"])

        data = json.loads(result.output)
        assert data["status"] == "ok"
        assert data["event"]["title"] == "Call"
        assert data["countdown_trigger_millis"] == 5000 + 600000

    def test_empty(self, runner):
        result = runner.invoke(main, ["next"])
        assert result.exit_code == 0
        assert "No upcoming events" in result.output

    def test_permission(self, runner, source):
        source.has_read_permission.return_value = False
        result = runner.invoke(main, ["next", "--json"])
        assert json.loads(result.output)["status"] == "permission_denied"


class TestSelectionCommands:
    def test_calendars_first_run_selects_all(self, runner, config, source):
        result = runner.invoke(main, ["calendars"])

        assert result.exit_code == 0
        assert "[x] Work  (1)" in result.output
        assert "[x] Home  (2)" in result.output
        assert json.loads(open(config.selection_file).read()) == {"selected_calendars": ["1", "2"]}
        source.list_calendars.assert_called_once_with()

    def test_select_ids_then_list(self, runner):
        runner.invoke(main, ["select", "2"])

        result = runner.invoke(main, ["calendars"])

        assert "[ ] Work  (1)" in result.output
        assert "[x] Home  (2)" in result.output

    def test_select_none_hides_agenda(self, runner, source):
        source.query_instances.return_value = [event(ms(2025, 1, 10, 10), ms(2025, 1, 10, 11), "Review")]

        runner.invoke(main, ["select", "--none"])
        result = runner.invoke(main, ["agenda"])

        assert "No events scheduled." in result.output

    def test_select_all_forgets_selection(self, runner, config):
        runner.invoke(main, ["select", "1"])
        result = runner.invoke(main, ["select", "--all"])

        assert result.exit_code == 0
        assert json.loads(open(config.selection_file).read()) == {}

    def test_select_requires_exactly_one_mode(self, runner):
        assert runner.invoke(main, ["select"]).exit_code == 2
        assert runner.invoke(main, ["select", "1", "--none"]).exit_code == 2

    def test_calendars_without_permission(self, runner, source):
        source.has_read_permission.return_value = False
        result = runner.invoke(main, ["calendars"])
        assert result.exit_code == 1

    def test_calendars_source_failure(self, runner, source, config):
        source.list_calendars.side_effect = DataSourceUnavailable("icalPal timed out")

        result = runner.invoke(main, ["calendars"])

        assert result.exit_code == 1
        assert "Error: icalPal timed out" in result.output
        assert not os.path.exists(config.selection_file)


class TestAuthCommand:
    def test_requires_accounts(self, runner):
        result = runner.invoke(main, ["auth"])
        assert result.exit_code == 1
        assert "No Google accounts configured" in result.output
