"""Pure widget text formatting - no I/O dependencies."""

from datetime import tzinfo

from .agenda import AgendaEntry, AgendaHeader, local_datetime
from .calendar import EventInstance
from .countdown import format_countdown

PROGRESS_WIDTH = 10


def format_event_time(event: EventInstance, tz: tzinfo | None = None) -> str:
    """Start time for display, or 'All Day'."""
    if event.all_day:
        return "All Day"
    return local_datetime(event.start_millis, tz).strftime("%H:%M")


def format_progress_bar(progress: int, width: int = PROGRESS_WIDTH) -> str:
    filled = progress * width // 100
    return "[" + "#" * filled + "-" * (width - filled) + f"] {progress:3d}%"


def format_agenda_lines(entries: list[AgendaEntry], tz: tzinfo | None = None) -> list[str]:
    """
    Format agenda entries as terminal lines.

    Pure function - no I/O. All-day events never get a progress bar.
    """
    lines = []
    for entry in entries:
        if isinstance(entry, AgendaHeader):
            if lines:
                lines.append("")
            lines.append(f"### {entry.label}")
            continue

        event = entry.event
        line = f"  {format_event_time(event, tz):8} {event.title}"
        if not event.all_day:
            line = f"{line}  {format_progress_bar(entry.progress)}"
        lines.append(line)
    return lines


def format_next_event(
    event: EventInstance,
    now_millis: int,
    tz: tzinfo | None = None,
) -> list[str]:
    """Title, start and countdown lines for the next-event widget."""
    start = local_datetime(event.start_millis, tz)
    return [
        event.title,
        start.strftime("%a, %H:%M"),
        f"in {format_countdown(event.start_millis - now_millis)}",
    ]
