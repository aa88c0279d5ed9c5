"""Configuration management for nextup."""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

NEXTUP_HOME = Path(os.environ.get("NEXTUP_HOME", Path.home() / "nextup"))
CONFIG_FILE = NEXTUP_HOME / "config" / "nextup.conf"
DATA_DIR = NEXTUP_HOME / "data"
SELECTION_FILE = DATA_DIR / "widget_prefs.json"

SOURCES = ("google", "icalpal", "all")


@dataclass
class GoogleAccount:
    """A Google Calendar account configuration."""

    config_folder: str
    label: str | None = None
    calendars: list[str] = field(default_factory=list)


@dataclass
class Config:
    """nextup configuration."""

    source: str = "google"
    google_accounts: list[GoogleAccount] = field(default_factory=list)
    google_client_secret_file: str = ""
    timezone: str = ""
    icalpal_include_calendars: list[str] = field(default_factory=list)
    icalpal_exclude_calendars: list[str] = field(default_factory=list)
    selection_file: str = str(SELECTION_FILE)

    def tzinfo(self) -> tzinfo | None:
        """Configured zone, or None for the system local zone."""
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError:
            logger.warning(f"Unknown timezone '{self.timezone}', using system local time")
            return None


def _parse_accounts(value: str) -> list[GoogleAccount]:
    # JSON format: [{"config_folder": "...", "label": "...", "calendars": [...]}]
    # Simple format: "path1:label1,path2:label2"
    accounts = []
    if value.startswith("["):
        try:
            data = json.loads(value)
            for item in data:
                accounts.append(
                    GoogleAccount(
                        config_folder=item["config_folder"],
                        label=item.get("label"),
                        calendars=item.get("calendars", []),
                    )
                )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Failed to parse GOOGLE_ACCOUNTS JSON: {e}")
        return accounts

    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if ":" in entry:
            folder, label = entry.split(":", 1)
            accounts.append(GoogleAccount(folder.strip(), label.strip()))
        else:
            accounts.append(GoogleAccount(entry))
    return accounts


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from nextup.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "source":
                if value.lower() in SOURCES:
                    config.source = value.lower()
                else:
                    logger.warning(f"Unknown SOURCE '{value}', keeping '{config.source}'")
            case "google_accounts":
                config.google_accounts = _parse_accounts(value)
            case "google_client_secret_file":
                config.google_client_secret_file = value
            case "timezone":
                config.timezone = value
            case "icalpal_include_calendars":
                config.icalpal_include_calendars = [c.strip() for c in value.split(",") if c.strip()]
            case "icalpal_exclude_calendars":
                config.icalpal_exclude_calendars = [c.strip() for c in value.split(",") if c.strip()]
            case "selection_file":
                config.selection_file = value

    return config
