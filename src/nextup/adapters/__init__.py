"""Adapters - I/O implementations of ports."""

from .google_calendar import GoogleCalendarAdapter
from .icalpal import IcalPalAdapter
from .composite_calendar import CompositeCalendarAdapter
from .file_selection import FileSelectionStore

__all__ = [
    "GoogleCalendarAdapter",
    "IcalPalAdapter",
    "CompositeCalendarAdapter",
    "FileSelectionStore",
]
