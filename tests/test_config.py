"""Tests for configuration loading."""

from zoneinfo import ZoneInfo

import pytest

from nextup.config import Config, GoogleAccount, load_config


@pytest.fixture
def write_config(tmp_path):
    def _write(text: str):
        path = tmp_path / "nextup.conf"
        path.write_text(text)
        return path
    return _write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.conf")
        assert config == Config()
        assert config.source == "google"

    def test_simple_values(self, write_config):
        path = write_config(
            "# comment\n"
            "SOURCE=all\n"
            'TIMEZONE="America/Toronto" # local\n'
            "GOOGLE_CLIENT_SECRET_FILE=~/secret.json # inline\n"
            "SELECTION_FILE='/tmp/prefs.json'\n"
            "not a setting\n"
        )

        config = load_config(path)

        assert config.source == "all"
        assert config.timezone == "America/Toronto"
        assert config.google_client_secret_file == "~/secret.json"
        assert config.selection_file == "/tmp/prefs.json"

    def test_unknown_source_keeps_default(self, write_config):
        config = load_config(write_config("SOURCE=outlook\n"))
        assert config.source == "google"

    def test_icalpal_lists(self, write_config):
        config = load_config(write_config("ICALPAL_INCLUDE_CALENDARS=Work, Home,\nICALPAL_EXCLUDE_CALENDARS=Birthdays\n"))
        assert config.icalpal_include_calendars == ["Work", "Home"]
        assert config.icalpal_exclude_calendars == ["Birthdays"]

    def test_accounts_simple_format(self, write_config):
        config = load_config(write_config("GOOGLE_ACCOUNTS=~/.gc/work:Work, ~/.gc/home\n"))
        assert config.google_accounts == [
            GoogleAccount("~/.gc/work", "Work"),
            GoogleAccount("~/.gc/home"),
        ]

    def test_accounts_json_format(self, write_config):
        config = load_config(
            write_config('GOOGLE_ACCOUNTS=[{"config_folder": "~/.gc/work", "label": "Work", "calendars": ["Team"]}]\n')
        )
        assert config.google_accounts == [GoogleAccount("~/.gc/work", "Work", ["Team"])]

    def test_accounts_bad_json(self, write_config):
        config = load_config(write_config("GOOGLE_ACCOUNTS=[{broken\n"))
        assert config.google_accounts == []


class TestTzinfo:
    def test_empty_means_local(self):
        assert Config().tzinfo() is None

    def test_named_zone(self):
        assert Config(timezone="Europe/Paris").tzinfo() == ZoneInfo("Europe/Paris")

    def test_unknown_zone_falls_back(self):
        assert Config(timezone="Mars/Olympus").tzinfo() is None
