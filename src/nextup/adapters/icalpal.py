"""icalPal adapter - subprocess wrapper for macOS Calendar."""

import json
import logging
import shutil
import subprocess
import zlib
from datetime import date, datetime

from nextup.core.calendar import CalendarInfo, EventInstance
from nextup.ports.calendar_source import DataSourceUnavailable

logger = logging.getLogger(__name__)


def _ctime_millis(value: str) -> int:
    """Parse an icalPal time string such as "2026-01-27 14:00:00 -0500"."""
    return int(datetime.strptime(value, "%Y-%m-%d %H:%M:%S %z").timestamp() * 1000)


class IcalPalAdapter:
    """
    icalPal subprocess adapter.

    Reads event instances from macOS Calendar via the icalPal CLI tool.
    Calendars are identified by name, which is what icalPal reports.
    """

    def __init__(
        self,
        include_calendars: list[str] | None = None,
        exclude_calendars: list[str] | None = None,
        timeout: int = 30,
    ):
        self.include_calendars = include_calendars
        self.exclude_calendars = exclude_calendars
        self.timeout = timeout

    def has_read_permission(self) -> bool:
        return shutil.which("icalPal") is not None

    def _run(self, args: list[str]) -> list[dict]:
        cmd = ["icalPal", *args, "-o", "json"]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
            return json.loads(result.stdout) if result.stdout else []
        except subprocess.CalledProcessError as e:
            logger.warning(f"icalPal command failed: {e}")
            raise DataSourceUnavailable(f"icalPal command failed: {e}") from e
        except FileNotFoundError as e:
            logger.warning("icalPal not found - install with 'brew install icalpal'")
            raise DataSourceUnavailable("icalPal not found") from e
        except subprocess.TimeoutExpired as e:
            logger.warning(f"icalPal timed out after {self.timeout}s")
            raise DataSourceUnavailable(f"icalPal timed out after {self.timeout}s") from e
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse icalPal output: {e}")
            raise DataSourceUnavailable(f"Failed to parse icalPal output: {e}") from e

    def query_instances(self, window_start_millis: int, window_end_millis: int) -> list[EventInstance]:
        """Instances intersecting the window, ordered by start."""
        # icalPal counts days from the start of today, so fetch through the
        # window's last day and trim to the window here
        today = date.today()
        last_day = datetime.fromtimestamp(window_end_millis / 1000).date()
        days = max((last_day - today).days + 1, 1)
        command = "eventsToday" if days <= 1 else f"eventsToday+{days}"

        events = [
            e
            for e in self._parse_events(self._run([command]))
            if e.start_millis <= window_end_millis and e.end_millis >= window_start_millis
        ]
        return sorted(events, key=lambda e: e.start_millis)

    def list_calendars(self) -> list[CalendarInfo]:
        names = []
        for item in self._run(["calendars"]):
            name = item.get("calendar", "")
            if name and name not in names and self._wanted(name):
                names.append(name)
        return [CalendarInfo(id=name, name=name) for name in names]

    def _wanted(self, cal_name: str) -> bool:
        if self.include_calendars and cal_name not in self.include_calendars:
            return False
        if self.exclude_calendars and cal_name in self.exclude_calendars:
            return False
        return True

    def _parse_events(self, data: list[dict]) -> list[EventInstance]:
        """Parse icalPal JSON output into EventInstance objects."""
        events = []

        for item in data:
            if not self._wanted(item.get("calendar", "")):
                continue

            try:
                event = self._parse_event(item)
                if event:
                    events.append(event)
            except (ValueError, KeyError, TypeError) as e:
                logger.debug(f"Skipping malformed event: {e}")
                continue

        return events

    def _parse_event(self, item: dict) -> EventInstance | None:
        """Parse a single event from icalPal data."""
        is_all_day = item.get("all_day") == 1

        # Use sctime/ectime strings - they have correct dates for recurring events
        if item.get("sctime"):
            start_millis = _ctime_millis(item["sctime"])
        elif item.get("sseconds"):
            start_millis = int(item["sseconds"] * 1000)
        else:
            return None

        if item.get("ectime"):
            end_millis = _ctime_millis(item["ectime"])
        elif item.get("eseconds"):
            end_millis = int(item["eseconds"] * 1000)
        else:
            end_millis = start_millis

        cal_name = item.get("calendar", "")
        title = item.get("title") or "No Title"
        return EventInstance(
            id=zlib.crc32(f"{cal_name}|{title}|{start_millis}".encode()),
            title=title,
            start_millis=start_millis,
            end_millis=end_millis,
            all_day=is_all_day,
            calendar_id=cal_name,
        )
