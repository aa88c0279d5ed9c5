"""Tests for next-event selection, progress and countdown math."""

import pytest

from nextup.core.calendar import EventInstance
from nextup.core.countdown import (
    format_countdown,
    progress_percent,
    project_countdown_trigger,
    select_next,
)


def event(start: int, end: int, all_day: bool = False) -> EventInstance:
    return EventInstance(id=start, title="Event", start_millis=start, end_millis=end, all_day=all_day, calendar_id="1")


class TestSelectNext:
    def test_empty(self):
        assert select_next([]) is None
        assert select_next(iter([])) is None

    def test_takes_first_not_minimum(self):
        first = event(5000, 6000)
        second = event(3000, 4000)
        assert select_next([first, second]) is first

    def test_short_circuits(self):
        consumed = []

        def source():
            for start in (1000, 2000, 3000):
                consumed.append(start)
                yield event(start, start + 500)

        result = select_next(source())
        assert result.start_millis == 1000
        assert consumed == [1000]


class TestProgressPercent:
    @pytest.mark.parametrize(
        "now, expected",
        [(1500, 50), (999, 0), (1000, 0), (2000, 100), (2500, 100), (1001, 0), (1999, 99)],
    )
    def test_timed_event(self, now, expected):
        assert progress_percent(event(1000, 2000), now) == expected

    @pytest.mark.parametrize("now", [0, 1000, 1500, 2000, 10**12])
    def test_all_day_is_always_zero(self, now):
        assert progress_percent(event(1000, 2000, all_day=True), now) == 0

    def test_zero_length_event(self):
        assert progress_percent(event(1000, 1000), 5000) == 0

    def test_negative_length_event(self):
        assert progress_percent(event(2000, 1000), 1500) == 0

    def test_truncates(self):
        # 2/3 of the way through is 66.66...
        assert progress_percent(event(0, 3000), 2000) == 66

    @pytest.mark.parametrize("now", [7, 29, 57, 58])
    def test_exact_percent_is_not_rounded_down(self, now):
        assert progress_percent(event(0, 100), now) == now


class TestProjectCountdownTrigger:
    def test_offsets_monotonic_clock(self):
        assert project_countdown_trigger(100000, 90000, 500) == 10500

    def test_past_target(self):
        assert project_countdown_trigger(80000, 90000, 50000) == 40000


class TestFormatCountdown:
    def test_hours_minutes_seconds(self):
        assert format_countdown((1 * 3600 + 2 * 60 + 3) * 1000) == "1:02:03"

    def test_days(self):
        assert format_countdown((2 * 86400 + 5 * 3600) * 1000) == "2d 5:00:00"

    def test_negative_clamps(self):
        assert format_countdown(-5000) == "0:00:00"
