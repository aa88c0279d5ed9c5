"""Day-grouped agenda assembly - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, Union

from .calendar import EventInstance
from .countdown import progress_percent


@dataclass(frozen=True)
class AgendaHeader:
    """Day section header, anchored at the start of the day's first event."""

    label: str
    anchor_millis: int


@dataclass(frozen=True)
class AgendaItem:
    """An event row with its progress at render time."""

    event: EventInstance
    progress: int


AgendaEntry = Union[AgendaHeader, AgendaItem]


def local_datetime(millis: int, tz: tzinfo | None = None) -> datetime:
    """Interpret epoch milliseconds in ``tz``, or the system local zone if None."""
    return datetime.fromtimestamp(millis / 1000, tz)


def day_key(millis: int, tz: tzinfo | None = None) -> tuple[int, int]:
    """Calendar-day identity: (year, day of year)."""
    dt = local_datetime(millis, tz)
    return dt.year, dt.timetuple().tm_yday


def format_long_date(dt: datetime) -> str:
    """Weekday, month and day, e.g. 'Friday, June 6'."""
    return f"{dt.strftime('%A, %B')} {dt.day}"


def header_label(start_millis: int, now_millis: int, tz: tzinfo | None = None) -> str:
    """Header text for the day containing ``start_millis``, relative to now."""
    event_day = local_datetime(start_millis, tz)
    today = local_datetime(now_millis, tz).date()

    if event_day.date() == today:
        return "Today"
    # Full date comparison, so Dec 31 -> Jan 1 is still "Tomorrow"
    if event_day.date() == today + timedelta(days=1):
        return "Tomorrow"
    return format_long_date(event_day)


def group_by_day(
    events: Iterable[EventInstance],
    now_millis: int,
    tz: tzinfo | None = None,
) -> list[AgendaEntry]:
    """
    Split an ordered event sequence into day sections.

    Pure function - no I/O. Events must already be filtered and sorted by
    start; a header is inserted before the first event of each day and the
    input order is otherwise kept as is.
    """
    entries: list[AgendaEntry] = []
    last_key = None

    for event in events:
        key = day_key(event.start_millis, tz)
        if key != last_key:
            entries.append(
                AgendaHeader(
                    label=header_label(event.start_millis, now_millis, tz),
                    anchor_millis=event.start_millis,
                )
            )
            last_key = key
        entries.append(AgendaItem(event=event, progress=progress_percent(event, now_millis)))

    return entries
