"""
Tests for the full-day availability builder.
"""

from datetime import date, time
from uuid import uuid4

import pendulum

from staffavailability.domain import intervals
from staffavailability.domain.day_availability import DayAvailabilityBuilder
from staffavailability.domain.models import OnetimeBlock, RecurringBreak, TimeInterval

TZ = pendulum.timezone("Asia/Colombo")
DAY = date(2024, 7, 1)  # Monday
EMPLOYEE = uuid4()


def _at(value: str) -> pendulum.DateTime:
    return pendulum.parse(value, tz="Asia/Colombo")


def _window(start="09:00", end="17:00") -> TimeInterval:
    return TimeInterval(start=_at(f"2024-07-01 {start}"), end=_at(f"2024-07-01 {end}"))


def _break(start: time, end: time, reason="Lunch") -> RecurringBreak:
    return RecurringBreak(
        employee_id=EMPLOYEE,
        day_of_week=1,
        start_time=start,
        end_time=end,
        reason=reason,
    )


def _block(start: str, end: str, reason="Leave") -> OnetimeBlock:
    return OnetimeBlock(employee_id=EMPLOYEE, start=_at(start), end=_at(end), reason=reason)


def _clock(items):
    return [item.interval.format_clock(TZ) for item in items]


def _build(blocks=(), breaks=(), window=None):
    builder = DayAvailabilityBuilder(TZ)
    return builder.build(
        employee_id=EMPLOYEE,
        day=DAY,
        schedule_window=window or _window(),
        blocks=list(blocks),
        breaks=list(breaks),
    )


class TestDayAvailabilityBuilder:
    """Tests for DayAvailabilityBuilder."""

    def test_break_without_blocks(self):
        """Schedule 09-17, break 12-13, no blocks."""
        result = _build(breaks=[_break(time(12, 0), time(13, 0))])

        assert _clock(result.breaks) == ["12:00-13:00"]
        assert result.blocks == []

    def test_block_inside_break_splits_it(self):
        """Block 12:30-12:45 splits break 12-13 in two, both keep the reason."""
        result = _build(
            breaks=[_break(time(12, 0), time(13, 0))],
            blocks=[_block("2024-07-01 12:30", "2024-07-01 12:45")],
        )

        assert _clock(result.breaks) == ["12:00-12:30", "12:45-13:00"]
        assert [item.reason for item in result.breaks] == ["Lunch", "Lunch"]
        assert _clock(result.blocks) == ["12:30-12:45"]

    def test_full_day_block_removes_break(self):
        result = _build(
            breaks=[_break(time(12, 0), time(13, 0))],
            blocks=[_block("2024-07-01 09:00", "2024-07-01 17:00")],
        )

        assert result.breaks == []
        assert _clock(result.blocks) == ["09:00-17:00"]

    def test_block_trims_break_edge(self):
        result = _build(
            breaks=[_break(time(12, 0), time(13, 0))],
            blocks=[_block("2024-07-01 11:00", "2024-07-01 12:20")],
        )

        assert _clock(result.breaks) == ["12:20-13:00"]

    def test_several_blocks_on_one_break(self):
        result = _build(
            breaks=[_break(time(12, 0), time(14, 0))],
            blocks=[
                _block("2024-07-01 12:15", "2024-07-01 12:30"),
                _block("2024-07-01 13:00", "2024-07-01 13:30", reason="Training"),
            ],
        )

        assert _clock(result.breaks) == ["12:00-12:15", "12:30-13:00", "13:30-14:00"]

    def test_block_touching_break_leaves_it_intact(self):
        result = _build(
            breaks=[_break(time(12, 0), time(13, 0))],
            blocks=[_block("2024-07-01 13:00", "2024-07-01 14:00")],
        )

        assert _clock(result.breaks) == ["12:00-13:00"]

    def test_multi_day_block_is_clipped_to_schedule(self):
        result = _build(blocks=[_block("2024-06-28 08:00", "2024-07-03 18:00", reason="Vacation")])

        assert _clock(result.blocks) == ["09:00-17:00"]
        assert result.blocks[0].reason == "Vacation"

    def test_block_outside_schedule_is_dropped(self):
        result = _build(blocks=[_block("2024-07-01 07:00", "2024-07-01 09:00")])

        assert result.blocks == []

    def test_break_outside_schedule_is_dropped_and_partial_is_clipped(self):
        result = _build(
            breaks=[
                _break(time(7, 0), time(8, 0), reason="Early"),
                _break(time(16, 30), time(17, 30), reason="Late"),
            ]
        )

        assert _clock(result.breaks) == ["16:30-17:00"]
        assert result.breaks[0].reason == "Late"

    def test_midnight_crossing_schedule_keeps_night_block(self):
        window = TimeInterval(start=_at("2024-07-01 22:00"), end=_at("2024-07-02 02:00"))

        result = _build(
            window=window,
            blocks=[_block("2024-07-02 00:30", "2024-07-02 01:00")],
            breaks=[_break(time(23, 30), time(0, 30), reason="Midnight snack")],
        )

        assert _clock(result.blocks) == ["00:30-01:00"]
        assert _clock(result.breaks) == ["23:30-00:30"]

    def test_is_idempotent(self):
        breaks = [_break(time(12, 0), time(13, 0))]
        blocks = [_block("2024-07-01 12:30", "2024-07-01 12:45")]

        assert _build(blocks=blocks, breaks=breaks) == _build(blocks=blocks, breaks=breaks)

    def test_results_are_bounded_and_breaks_never_overlap_blocks(self):
        window = _window()
        result = _build(
            window=window,
            breaks=[
                _break(time(8, 0), time(10, 0)),
                _break(time(12, 0), time(13, 0)),
                _break(time(15, 0), time(18, 0)),
            ],
            blocks=[
                _block("2024-07-01 08:30", "2024-07-01 09:30"),
                _block("2024-07-01 12:10", "2024-07-01 12:20"),
                _block("2024-07-01 16:00", "2024-07-02 10:00"),
            ],
        )

        for item in result.blocks + result.breaks:
            assert item.interval.start < item.interval.end
            assert window.contains(item.interval)

        for item in result.breaks:
            for block in result.blocks:
                assert not intervals.overlaps(item.interval, block.interval)

    def test_to_dict_returns_empty_lists(self):
        data = _build().to_dict(TZ)

        assert data["onetimeblocks"] == []
        assert data["breaks"] == []
        assert data["schedule"] == {
            "start_time": "2024-07-01T09:00:00+05:30",
            "end_time": "2024-07-01T17:00:00+05:30",
        }
