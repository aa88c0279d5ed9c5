"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, Iterator, Protocol

DAY_MILLIS = 24 * 60 * 60 * 1000

AGENDA_LOOKBACK_MILLIS = 60 * 60 * 1000
AGENDA_SPAN_DAYS = 30
NEXT_EVENT_GUARD_MILLIS = 60 * 1000
NEXT_EVENT_SPAN_MILLIS = 365 * DAY_MILLIS


@dataclass(frozen=True)
class EventInstance:
    """One concrete occurrence of a calendar event."""

    id: int
    title: str
    start_millis: int
    end_millis: int
    all_day: bool
    calendar_id: str

    def duration_millis(self) -> int:
        return self.end_millis - self.start_millis


@dataclass(frozen=True)
class CalendarInfo:
    """A calendar the user can select."""

    id: str
    name: str


@dataclass(frozen=True)
class SelectionState:
    """
    The user's calendar selection.

    ``selected_calendar_ids`` is None when no preference has been saved yet,
    which means every calendar is shown. An empty set hides everything.
    """

    selected_calendar_ids: frozenset[str] | None = None

    @classmethod
    def unfiltered(cls) -> "SelectionState":
        return cls(None)

    @classmethod
    def of(cls, calendar_ids: Iterable[str]) -> "SelectionState":
        return cls(frozenset(calendar_ids))

    @property
    def is_filtered(self) -> bool:
        return self.selected_calendar_ids is not None


@dataclass(frozen=True)
class QueryWindow:
    """
    Time range for an instance query, in epoch milliseconds.

    With ``starts_after_start`` set, instances that merely overlap the window
    are dropped: only those starting strictly after ``start_millis`` survive.
    """

    start_millis: int
    end_millis: int
    starts_after_start: bool = False


class InstanceQuery(Protocol):
    """Anything that can list instances intersecting a window, ordered by start."""

    def query_instances(self, window_start_millis: int, window_end_millis: int) -> Iterable[EventInstance]:
        ...


def includes(selection: SelectionState, calendar_id: str) -> bool:
    """Check whether events of a calendar are visible under a selection."""
    if selection.selected_calendar_ids is None:
        return True
    return calendar_id in selection.selected_calendar_ids


def filter_instances(
    instances: Iterable[EventInstance],
    selection: SelectionState,
) -> Iterator[EventInstance]:
    """
    Lazily drop instances from calendars outside the selection.

    Pure function - no I/O. Order is preserved.
    """
    return (e for e in instances if includes(selection, e.calendar_id))


def agenda_window(now_millis: int, tz: tzinfo | None = None) -> QueryWindow:
    """
    Window for the agenda list: one hour back, thirty calendar days ahead.

    The days are counted on the wall clock of ``tz`` (None for the system
    local zone), so across a DST change the span is thirty wall-clock days
    rather than 30 * 24 hours.
    """
    local_now = datetime.fromtimestamp(now_millis / 1000, tz)
    local_end = local_now + timedelta(days=AGENDA_SPAN_DAYS)
    span_millis = round((local_end.timestamp() - local_now.timestamp()) * 1000)
    return QueryWindow(
        start_millis=now_millis - AGENDA_LOOKBACK_MILLIS,
        end_millis=now_millis + span_millis,
    )


def next_event_window(now_millis: int) -> QueryWindow:
    """Window for the next-event countdown: one minute ahead up to a year."""
    return QueryWindow(
        start_millis=now_millis + NEXT_EVENT_GUARD_MILLIS,
        end_millis=now_millis + NEXT_EVENT_SPAN_MILLIS,
        starts_after_start=True,
    )


def query_instances(
    source: InstanceQuery,
    selection: SelectionState,
    window: QueryWindow,
) -> Iterator[EventInstance]:
    """
    Query a source for a window and apply the calendar selection.

    The source is expected to yield instances in non-decreasing start order;
    the result keeps that order and is consumed lazily. Callers must check
    read permission before calling this.
    """
    instances = filter_instances(
        source.query_instances(window.start_millis, window.end_millis),
        selection,
    )
    if window.starts_after_start:
        return (e for e in instances if e.start_millis > window.start_millis)
    return instances
