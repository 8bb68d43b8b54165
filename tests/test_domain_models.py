"""
Tests for domain models and timezone helpers.
"""

from datetime import date, time
from uuid import uuid4

import pendulum
import pytest

from staffavailability.domain import intervals
from staffavailability.domain.models import (
    EmployeeMatch,
    OnetimeBlock,
    RecurringBreak,
    SlotFormat,
    TimeInterval,
    WeeklySchedule,
    is_valid,
)
from staffavailability.domain.timezones import (
    anchor_clock_range,
    day_bounds,
    local_date,
    resolve_timezone,
    weekday_index,
)

TZ = pendulum.timezone("Asia/Colombo")


class TestTimeInterval:
    """Tests for TimeInterval model."""

    def test_create_valid_interval(self):
        start = pendulum.parse("2024-07-01 09:00", tz="Asia/Colombo")
        end = pendulum.parse("2024-07-01 17:00", tz="Asia/Colombo")

        interval = TimeInterval(start=start, end=end)

        assert interval.start == start
        assert interval.end == end
        assert interval.duration_minutes() == 480

    def test_invalid_interval_raises_error(self):
        start = pendulum.parse("2024-07-01 17:00", tz="Asia/Colombo")
        end = pendulum.parse("2024-07-01 09:00", tz="Asia/Colombo")

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeInterval(start=start, end=end)

    def test_create_returns_none_for_empty_range(self):
        instant = pendulum.parse("2024-07-01 09:00", tz="Asia/Colombo")

        assert TimeInterval.create(instant, instant) is None

    def test_constructor_and_create_follow_is_valid(self):
        """Both construction paths and the interval helpers share one predicate."""
        early = pendulum.parse("2024-07-01 09:00", tz="Asia/Colombo")
        late = pendulum.parse("2024-07-01 09:01", tz="Asia/Colombo")

        assert intervals.is_valid is is_valid
        for start, end in [(early, late), (early, early), (late, early)]:
            created = TimeInterval.create(start, end)
            assert (created is not None) == is_valid(start, end)
            if not is_valid(start, end):
                with pytest.raises(ValueError):
                    TimeInterval(start=start, end=end)

    def test_format_clock_uses_operating_timezone(self):
        interval = TimeInterval(
            start=pendulum.parse("2024-07-01T04:30:00Z"),
            end=pendulum.parse("2024-07-01T05:30:00Z"),
        )

        assert interval.format_clock(TZ) == "10:00-11:00"

    def test_to_dict_carries_offset(self):
        interval = TimeInterval(
            start=pendulum.parse("2024-07-01 10:00", tz="Asia/Colombo"),
            end=pendulum.parse("2024-07-01 11:00", tz="Asia/Colombo"),
        )

        assert interval.to_dict(TZ) == {
            "start": "2024-07-01T10:00:00+05:30",
            "end": "2024-07-01T11:00:00+05:30",
        }


class TestWeeklySchedule:
    """Tests for schedule validity and anchoring."""

    def _schedule(self, **overrides) -> WeeklySchedule:
        values = dict(
            employee_id=uuid4(),
            day_of_week=1,
            start_time=time(9, 0),
            end_time=time(17, 0),
            valid_from=date(2024, 1, 1),
            valid_until=None,
        )
        values.update(overrides)
        return WeeklySchedule(**values)

    def test_open_ended_rule_is_active(self):
        schedule = self._schedule()

        assert schedule.is_active_on(date(2030, 1, 7))
        assert not schedule.is_active_on(date(2023, 12, 25))

    def test_valid_until_is_inclusive(self):
        schedule = self._schedule(valid_until=date(2024, 7, 1))

        assert schedule.is_active_on(date(2024, 7, 1))
        assert not schedule.is_active_on(date(2024, 7, 8))

    def test_window_for_day(self):
        window = self._schedule().window_for(date(2024, 7, 1), TZ)

        assert window.start == pendulum.parse("2024-07-01 09:00", tz="Asia/Colombo")
        assert window.end == pendulum.parse("2024-07-01 17:00", tz="Asia/Colombo")

    def test_midnight_crossing_window_ends_next_day(self):
        schedule = self._schedule(start_time=time(22, 0), end_time=time(2, 0))

        window = schedule.window_for(date(2024, 7, 1), TZ)

        assert schedule.crosses_midnight()
        assert window.end == pendulum.parse("2024-07-02 02:00", tz="Asia/Colombo")
        assert window.duration_minutes() == 240

    def test_zero_length_rule_has_no_window(self):
        schedule = self._schedule(start_time=time(9, 0), end_time=time(9, 0))

        assert schedule.window_for(date(2024, 7, 1), TZ) is None


class TestBreaksAndBlocks:
    """Tests for break anchoring and block intervals."""

    def test_break_interval_for_day(self):
        item = RecurringBreak(
            employee_id=uuid4(),
            day_of_week=1,
            start_time=time(12, 0),
            end_time=time(13, 0),
            reason="Lunch",
        )

        interval = item.interval_for(date(2024, 7, 1), TZ)

        assert interval.format_clock(TZ) == "12:00-13:00"

    def test_block_with_reversed_times_has_no_interval(self):
        block = OnetimeBlock(
            employee_id=uuid4(),
            start=pendulum.parse("2024-07-01 12:00", tz="Asia/Colombo"),
            end=pendulum.parse("2024-07-01 11:00", tz="Asia/Colombo"),
        )

        assert block.interval is None


class TestEmployeeMatch:
    """Tests for both serialized shapes of a match."""

    def _match(self) -> EmployeeMatch:
        return EmployeeMatch(
            employee_id=uuid4(),
            service_ids=[uuid4()],
            free_slots=[
                TimeInterval(
                    start=pendulum.parse("2024-07-01 10:00", tz="Asia/Colombo"),
                    end=pendulum.parse("2024-07-01 10:30", tz="Asia/Colombo"),
                )
            ],
        )

    def test_clock_format(self):
        match = self._match()

        data = match.to_dict(SlotFormat.CLOCK, TZ)

        assert data["employeeid"] == str(match.employee_id)
        assert data["service"] == [str(match.service_ids[0])]
        assert data["EWT"] == ["10:00-10:30"]

    def test_iso_format(self):
        match = self._match()

        data = match.to_dict(SlotFormat.ISO, TZ)

        assert data["staffId"] == str(match.employee_id)
        assert data["availability"] == [
            {"start": "2024-07-01T10:00:00+05:30", "end": "2024-07-01T10:30:00+05:30"}
        ]


class TestTimezones:
    """Tests for timezone resolution and date helpers."""

    def test_weekday_index_starts_on_sunday(self):
        assert weekday_index(date(2024, 6, 30)) == 0  # Sunday
        assert weekday_index(date(2024, 7, 1)) == 1  # Monday
        assert weekday_index(date(2024, 7, 6)) == 6  # Saturday

    def test_resolve_known_timezone(self):
        tz = resolve_timezone("Asia/Colombo", 0)

        assert tz.name == "Asia/Colombo"

    def test_resolve_unknown_timezone_falls_back_to_offset(self):
        tz = resolve_timezone("Mars/Olympus_Mons", 330)
        instant = pendulum.datetime(2024, 7, 1, 9, 0, tz=tz)

        assert instant.utcoffset().total_seconds() == 330 * 60

    def test_anchor_clock_range_rolls_over(self):
        start, end = anchor_clock_range(date(2024, 7, 1), time(23, 0), time(1, 0), TZ)

        assert start.day == 1
        assert end.day == 2

    def test_day_bounds(self):
        start, end = day_bounds(date(2024, 7, 1), TZ)

        assert start == pendulum.parse("2024-07-01 00:00", tz="Asia/Colombo")
        assert end.date() == date(2024, 7, 1)
        assert (end.hour, end.minute, end.second) == (23, 59, 59)

    def test_local_date_converts_instant(self):
        instant = pendulum.parse("2024-06-30T20:00:00Z")

        assert local_date(instant, TZ) == date(2024, 7, 1)
