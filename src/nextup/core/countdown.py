"""Next-event selection, progress and countdown math - no I/O dependencies."""

from typing import Iterable

from .calendar import EventInstance


def select_next(events: Iterable[EventInstance]) -> EventInstance | None:
    """
    Return the soonest event of an already ordered, future-only sequence.

    Takes the first element as given; the sequence is not searched for a
    minimum. At most one element of a lazy iterable is consumed.
    """
    return next(iter(events), None)


def progress_percent(event: EventInstance, now_millis: int) -> int:
    """
    Completion of a timed event at ``now_millis``, from 0 to 100.

    All-day events and events without a positive duration always report 0.
    """
    if event.all_day or event.end_millis <= event.start_millis:
        return 0
    if now_millis >= event.end_millis:
        return 100
    if now_millis <= event.start_millis:
        return 0
    elapsed = now_millis - event.start_millis
    return 100 * elapsed // event.duration_millis()


def project_countdown_trigger(
    target_millis: int,
    now_wall_millis: int,
    now_monotonic_millis: int,
) -> int:
    """
    Map a wall-clock instant onto the monotonic clock.

    Display timers count against a monotonic clock while event times are
    wall-clock, and the two drift apart, so this has to be recomputed on
    every render.
    """
    return now_monotonic_millis + (target_millis - now_wall_millis)


def format_countdown(remaining_millis: int) -> str:
    """Format a remaining duration as H:MM:SS, prefixed with days when needed."""
    seconds = max(remaining_millis, 0) // 1000
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    clock = f"{hours}:{minutes:02d}:{seconds:02d}"
    if days:
        return f"{days}d {clock}"
    return clock
