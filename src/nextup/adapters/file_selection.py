"""File-based calendar selection storage adapter."""

import json
import logging
from pathlib import Path
from typing import Iterable

from nextup.core.calendar import SelectionState

logger = logging.getLogger(__name__)

SELECTED_CALENDARS_KEY = "selected_calendars"


class FileSelectionStore:
    """
    JSON key-value file holding the visible calendar set.

    Implements SelectionStore protocol. A missing key means no preference
    was saved, which is different from a saved empty list.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable selection file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))

    def read_selection(self) -> SelectionState:
        """Read the selection. Missing file or key means unfiltered."""
        ids = self._load().get(SELECTED_CALENDARS_KEY)
        if ids is None:
            return SelectionState.unfiltered()
        return SelectionState.of(str(i) for i in ids)

    def write_selection(self, calendar_ids: Iterable[str]) -> None:
        """Persist an explicit selection (possibly empty)."""
        data = self._load()
        data[SELECTED_CALENDARS_KEY] = sorted(set(calendar_ids))
        self._save(data)

    def clear_selection(self) -> None:
        """Forget the preference so that every calendar is shown."""
        data = self._load()
        if data.pop(SELECTED_CALENDARS_KEY, None) is not None:
            self._save(data)
