"""Calendar source interface."""

from typing import Iterable, Protocol

from nextup.core.calendar import CalendarInfo, EventInstance


class PermissionDenied(Exception):
    """Raised when calendar read access has not been granted."""

    pass


class DataSourceUnavailable(Exception):
    """Raised when the calendar backend cannot be read."""

    pass


class CalendarSource(Protocol):
    """Interface for reading event instances from any calendar backend."""

    def has_read_permission(self) -> bool:
        """Whether calendar data may be read at all."""
        ...

    def query_instances(self, window_start_millis: int, window_end_millis: int) -> Iterable[EventInstance]:
        """Instances intersecting the window, in ascending start order."""
        ...

    def list_calendars(self) -> list[CalendarInfo]:
        """Calendars available for selection."""
        ...
