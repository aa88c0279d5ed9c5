"""Ports - interfaces/protocols for external dependencies."""

from .calendar_source import CalendarSource, DataSourceUnavailable, PermissionDenied
from .selection_store import SelectionStore

__all__ = [
    "CalendarSource",
    "DataSourceUnavailable",
    "PermissionDenied",
    "SelectionStore",
]
