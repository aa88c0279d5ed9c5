"""Google Calendar API adapter."""

import heapq
import logging
import zlib
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Iterator

from nextup.core.calendar import CalendarInfo, EventInstance
from nextup.ports.calendar_source import DataSourceUnavailable, PermissionDenied

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]
PAGE_SIZE = 250


def _to_rfc3339(millis: int) -> str:
    return datetime.fromtimestamp(millis / 1000, timezone.utc).isoformat().replace("+00:00", "Z")


def _to_millis(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def _instance_id(item: dict) -> int:
    """Google ids are strings; widgets want a stable integer."""
    return zlib.crc32(item.get("id", "").encode())


class GoogleCalendarAdapter:
    """Reads event instances from Google Calendar via the API."""

    def __init__(
        self,
        config_folder: str,
        label: str | None = None,
        calendars: list[str] | None = None,
        client_secret_file: str = "",
        tz: tzinfo | None = None,
    ):
        self.config_folder = config_folder
        self.label = label or Path(config_folder).name
        self.calendars = calendars
        self.client_secret_file = client_secret_file
        self.tz = tz
        self._token_path = Path(config_folder).expanduser() / "token.json"

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            logger.warning(f"No token.json for {self.label} - run 'nextup auth'")
            return None

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
                self._token_path.write_text(creds.to_json())
                self._token_path.chmod(0o600)
            except Exception as e:
                logger.warning(f"Failed to refresh token for {self.label}: {e}")
                return None

        return creds

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        if not creds:
            return None
        return build("calendar", "v3", credentials=creds)

    def _calendar_entries(self, service) -> list[dict]:
        result = service.calendarList().list().execute()
        return result.get("items", [])

    def _resolve_calendar_ids(self, service) -> list[str]:
        """Resolve display name filters to calendar IDs. No filter means every calendar."""
        entries = self._calendar_entries(service)
        if not self.calendars:
            return [entry["id"] for entry in entries] or ["primary"]

        cal_map = {entry["summary"]: entry["id"] for entry in entries}
        ids = []
        for name in self.calendars:
            if name in cal_map:
                ids.append(cal_map[name])
            else:
                logger.warning(f"Calendar '{name}' not found for {self.label}")
        return ids or ["primary"]

    def authenticate(self) -> bool:
        """Run OAuth flow for this account. Returns True on success."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not self.client_secret_file:
            logger.error("No client secret file configured")
            return False

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            logger.error(f"Client secret file not found: {secret_path}")
            return False

        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0)

        token_dir = self._token_path.parent
        token_dir.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)
        return True

    def has_read_permission(self) -> bool:
        """An account is readable once it has been through 'nextup auth'."""
        return self._token_path.exists()

    def query_instances(self, window_start_millis: int, window_end_millis: int) -> Iterator[EventInstance]:
        """
        Instances intersecting the window across all calendars, ordered by start.

        Calendars are paged lazily and merged, so a consumer that stops early
        does not fetch the whole window.
        """
        try:
            service = self._build_service()
        except Exception as e:
            raise DataSourceUnavailable(f"Google Calendar unavailable for {self.label}: {e}") from e
        if not service:
            raise PermissionDenied(f"No Google Calendar credentials for {self.label}")

        try:
            cal_ids = self._resolve_calendar_ids(service)
        except Exception as e:
            raise DataSourceUnavailable(f"Google Calendar unavailable for {self.label}: {e}") from e

        streams = [
            self._iter_calendar(service, cal_id, window_start_millis, window_end_millis)
            for cal_id in cal_ids
        ]
        return heapq.merge(*streams, key=lambda e: e.start_millis)

    def _iter_calendar(
        self,
        service,
        cal_id: str,
        window_start_millis: int,
        window_end_millis: int,
    ) -> Iterator[EventInstance]:
        page_token = None
        while True:
            try:
                result = (
                    service.events()
                    .list(
                        calendarId=cal_id,
                        timeMin=_to_rfc3339(window_start_millis),
                        timeMax=_to_rfc3339(window_end_millis),
                        singleEvents=True,
                        orderBy="startTime",
                        maxResults=PAGE_SIZE,
                        pageToken=page_token,
                    )
                    .execute()
                )
            except Exception as e:
                raise DataSourceUnavailable(f"Google Calendar API error for {self.label}: {e}") from e

            for item in result.get("items", []):
                event = self._parse_item(item, cal_id)
                if event:
                    yield event

            page_token = result.get("nextPageToken")
            if not page_token:
                return

    def _parse_item(self, item: dict, cal_id: str) -> EventInstance | None:
        """Parse a single API item into an EventInstance."""
        if item.get("status") == "cancelled":
            return None

        start_raw = item.get("start", {})
        end_raw = item.get("end", {})

        try:
            if "date" in start_raw:
                # All-day event: midnight in the display zone
                start_dt = datetime.fromisoformat(start_raw["date"]).replace(tzinfo=self.tz)
                end_dt = datetime.fromisoformat(end_raw.get("date", start_raw["date"])).replace(tzinfo=self.tz)
                all_day = True
            elif "dateTime" in start_raw:
                start_dt = datetime.fromisoformat(start_raw["dateTime"])
                end_dt = datetime.fromisoformat(end_raw.get("dateTime", start_raw["dateTime"]))
                all_day = False
            else:
                return None
        except ValueError as e:
            logger.debug(f"Skipping malformed Google event: {e}")
            return None

        return EventInstance(
            id=_instance_id(item),
            title=item.get("summary") or "No Title",
            start_millis=_to_millis(start_dt),
            end_millis=_to_millis(end_dt),
            all_day=all_day,
            calendar_id=cal_id,
        )

    def list_calendars(self) -> list[CalendarInfo]:
        """List calendars this account can read."""
        try:
            service = self._build_service()
            if not service:
                return []
            entries = self._calendar_entries(service)
        except Exception as e:
            raise DataSourceUnavailable(f"Google Calendar unavailable for {self.label}: {e}") from e

        return [CalendarInfo(id=entry["id"], name=entry.get("summary", "Unknown")) for entry in entries]
