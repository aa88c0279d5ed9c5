"""Functional core - pure business logic with no I/O."""

from .calendar import (
    EventInstance,
    QueryWindow,
    SelectionState,
    agenda_window,
    filter_instances,
    includes,
    next_event_window,
    query_instances,
)
from .agenda import AgendaEntry, AgendaHeader, AgendaItem, group_by_day, header_label
from .countdown import format_countdown, progress_percent, project_countdown_trigger, select_next

__all__ = [
    # Calendar
    "EventInstance",
    "QueryWindow",
    "SelectionState",
    "agenda_window",
    "filter_instances",
    "includes",
    "next_event_window",
    "query_instances",
    # Agenda
    "AgendaEntry",
    "AgendaHeader",
    "AgendaItem",
    "group_by_day",
    "header_label",
    # Countdown
    "format_countdown",
    "progress_percent",
    "project_countdown_trigger",
    "select_next",
]
