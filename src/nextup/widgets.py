"""Widget feeds - the agenda list and the next-event countdown.

Each feed checks read permission, runs the query through the calendar
selection and turns source failures into an error feed instead of raising,
so one bad refresh degrades the widget rather than breaking it.
"""

import logging
from dataclasses import dataclass
from datetime import tzinfo
from enum import Enum

from .core import agenda, calendar, countdown
from .core.agenda import AgendaEntry
from .core.calendar import CalendarInfo, EventInstance, SelectionState
from .ports.calendar_source import CalendarSource, DataSourceUnavailable, PermissionDenied
from .ports.selection_store import SelectionStore

logger = logging.getLogger(__name__)

AGENDA_PERMISSION_MESSAGE = "Permission Needed"
NEXT_EVENT_PERMISSION_MESSAGE = "Permission Required"
NO_UPCOMING_MESSAGE = "No upcoming events"


class FeedStatus(Enum):
    OK = "ok"
    EMPTY = "empty"
    PERMISSION_DENIED = "permission_denied"
    ERROR = "error"


@dataclass(frozen=True)
class AgendaFeed:
    """Agenda list contents, tagged with how they were produced."""

    status: FeedStatus
    entries: tuple[AgendaEntry, ...] = ()
    message: str = ""


@dataclass(frozen=True)
class NextEventFeed:
    """Next-event countdown contents, tagged with how they were produced."""

    status: FeedStatus
    event: EventInstance | None = None
    message: str = ""


def _error_message(e: Exception) -> str:
    return f"Error: {e}"


def build_agenda(
    source: CalendarSource,
    store: SelectionStore,
    now_millis: int,
    tz: tzinfo | None = None,
) -> AgendaFeed:
    """Build the day-grouped agenda for the window around ``now_millis``."""
    if not source.has_read_permission():
        return AgendaFeed(FeedStatus.PERMISSION_DENIED, message=AGENDA_PERMISSION_MESSAGE)

    selection = store.read_selection()
    window = calendar.agenda_window(now_millis, tz)
    try:
        events = list(calendar.query_instances(source, selection, window))
    except PermissionDenied as e:
        logger.warning(f"Calendar read denied: {e}")
        return AgendaFeed(FeedStatus.PERMISSION_DENIED, message=AGENDA_PERMISSION_MESSAGE)
    except DataSourceUnavailable as e:
        logger.warning(f"Calendar source unavailable: {e}")
        return AgendaFeed(FeedStatus.ERROR, message=_error_message(e))
    except Exception as e:
        logger.exception("Unexpected error while reading calendar instances")
        return AgendaFeed(FeedStatus.ERROR, message=_error_message(e))

    if not events:
        return AgendaFeed(FeedStatus.EMPTY)

    entries = agenda.group_by_day(events, now_millis, tz)
    return AgendaFeed(FeedStatus.OK, entries=tuple(entries))


def find_next_event(
    source: CalendarSource,
    store: SelectionStore,
    now_millis: int,
) -> NextEventFeed:
    """Find the soonest selected event starting more than a minute from now."""
    if not source.has_read_permission():
        return NextEventFeed(FeedStatus.PERMISSION_DENIED, message=NEXT_EVENT_PERMISSION_MESSAGE)

    selection = store.read_selection()
    window = calendar.next_event_window(now_millis)
    try:
        event = countdown.select_next(calendar.query_instances(source, selection, window))
    except PermissionDenied as e:
        logger.warning(f"Calendar read denied: {e}")
        return NextEventFeed(FeedStatus.PERMISSION_DENIED, message=NEXT_EVENT_PERMISSION_MESSAGE)
    except DataSourceUnavailable as e:
        logger.warning(f"Calendar source unavailable: {e}")
        return NextEventFeed(FeedStatus.ERROR, message=_error_message(e))
    except Exception as e:
        logger.exception("Unexpected error while reading calendar instances")
        return NextEventFeed(FeedStatus.ERROR, message=_error_message(e))

    if event is None:
        return NextEventFeed(FeedStatus.EMPTY, message=NO_UPCOMING_MESSAGE)
    return NextEventFeed(FeedStatus.OK, event=event)


def compute_progress(event: EventInstance, now_millis: int) -> int:
    """Progress of an event at ``now_millis``, 0-100."""
    return countdown.progress_percent(event, now_millis)


def project_countdown_trigger(target_millis: int, now_wall_millis: int, now_monotonic_millis: int) -> int:
    """Monotonic-clock time at which ``target_millis`` is reached."""
    return countdown.project_countdown_trigger(target_millis, now_wall_millis, now_monotonic_millis)


def ensure_default_selection(store: SelectionStore, calendars: list[CalendarInfo]) -> SelectionState:
    """
    On first run, save every known calendar as selected.

    ``calendars`` is the list already fetched from the source. Once a
    selection exists it is returned untouched. Nothing is saved when there
    are no calendars, so the preference stays absent.
    """
    selection = store.read_selection()
    if selection.is_filtered:
        return selection

    if not calendars:
        return selection

    store.write_selection(c.id for c in calendars)
    logger.info(f"Saved default selection of {len(calendars)} calendar(s)")
    return store.read_selection()
