"""Composite calendar adapter - combines multiple calendar sources."""

import heapq
import logging
from typing import Iterator

from nextup.config import Config
from nextup.core.calendar import CalendarInfo, EventInstance
from nextup.ports.calendar_source import CalendarSource, DataSourceUnavailable, PermissionDenied

from .google_calendar import GoogleCalendarAdapter
from .icalpal import IcalPalAdapter

logger = logging.getLogger(__name__)


class CompositeCalendarAdapter:
    """
    Composite calendar adapter that merges several sources.

    Implements CalendarSource protocol. Each source is already ordered by
    start, so the merge keeps that order without materialising the window.
    """

    def __init__(self, sources: list[CalendarSource]):
        self.sources = sources

    @classmethod
    def from_config(cls, config: Config) -> "CompositeCalendarAdapter":
        sources: list[CalendarSource] = []
        if config.source in ("icalpal", "all"):
            sources.append(
                IcalPalAdapter(
                    include_calendars=config.icalpal_include_calendars or None,
                    exclude_calendars=config.icalpal_exclude_calendars or None,
                )
            )
        if config.source in ("google", "all"):
            for account in config.google_accounts:
                sources.append(
                    GoogleCalendarAdapter(
                        config_folder=account.config_folder,
                        label=account.label,
                        calendars=account.calendars or None,
                        client_secret_file=config.google_client_secret_file,
                        tz=config.tzinfo(),
                    )
                )
        return cls(sources)

    def _readable(self) -> list[CalendarSource]:
        return [s for s in self.sources if s.has_read_permission()]

    def has_read_permission(self) -> bool:
        """Readable when at least one source is."""
        return bool(self._readable())

    def query_instances(self, window_start_millis: int, window_end_millis: int) -> Iterator[EventInstance]:
        """
        Merge instances from every readable source, ordered by start.

        A source that fails is logged and left out of the merge. The error is
        only raised when every readable source failed.
        """
        readable = self._readable()
        skipped = len(self.sources) - len(readable)
        if skipped:
            logger.debug(f"Skipping {skipped} calendar source(s) without read permission")

        failures: list[Exception] = []
        streams = [
            self._guarded(source, window_start_millis, window_end_millis, failures)
            for source in readable
        ]
        yield from heapq.merge(*streams, key=lambda e: e.start_millis)

        if readable and len(failures) == len(readable):
            raise failures[-1]

    def _guarded(
        self,
        source: CalendarSource,
        window_start_millis: int,
        window_end_millis: int,
        failures: list[Exception],
    ) -> Iterator[EventInstance]:
        try:
            yield from source.query_instances(window_start_millis, window_end_millis)
        except (DataSourceUnavailable, PermissionDenied) as e:
            logger.warning(f"Skipping calendar source {type(source).__name__}: {e}")
            failures.append(e)

    def list_calendars(self) -> list[CalendarInfo]:
        """Calendars of every readable source; failing sources are skipped."""
        readable = self._readable()
        calendars = []
        failures = []
        for source in readable:
            try:
                calendars.extend(source.list_calendars())
            except (DataSourceUnavailable, PermissionDenied) as e:
                logger.warning(f"Skipping calendar source {type(source).__name__}: {e}")
                failures.append(e)

        if readable and len(failures) == len(readable):
            raise failures[-1]
        return calendars
