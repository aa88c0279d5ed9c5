"""Calendar selection storage interface."""

from typing import Iterable, Protocol

from nextup.core.calendar import SelectionState


class SelectionStore(Protocol):
    """Interface for the persisted set of visible calendars."""

    def read_selection(self) -> SelectionState:
        """Read the selection. Absent preference means unfiltered."""
        ...

    def write_selection(self, calendar_ids: Iterable[str]) -> None:
        """Persist an explicit selection (possibly empty)."""
        ...

    def clear_selection(self) -> None:
        """Forget the preference so that every calendar is shown."""
        ...
