"""
Window-scoped free time for candidate employees.

Used when creating a booking: given a requested window, work out which part
of it each employee can still take.
"""

from datetime import date, time
from typing import Iterable, List

from pendulum import DateTime

from . import intervals
from .exceptions import InvalidInputError
from .models import BookedSlot, OnetimeBlock, RecurringBreak, TimeInterval, WeeklySchedule
from .timezones import TimezoneLike, anchor_clock_range, local_date


class SlotMatcher:
    """
    Computes an employee's free intervals inside a requested window.

    Algorithm:
    1. Any one-time block touching the window vetoes the employee outright
    2. Anchor the schedule to the window's date
    3. Subtract every recurring break for that weekday
    4. Intersect what is left with the window
    5. Optionally subtract already booked slots
    """

    def __init__(self, tz: TimezoneLike):
        self.tz = tz

    def validate_window(self, start: DateTime, end: DateTime) -> TimeInterval:
        """
        Check the requested window and return it as an interval.

        Raises:
            InvalidInputError: If the window is empty, reversed or spans
                two calendar dates in the operating timezone
        """
        window = TimeInterval.create(start, end)
        if window is None:
            raise InvalidInputError(f"Window start {start} must be before end {end}")

        # The end instant is exclusive, so a window ending exactly at midnight
        # still belongs to the start date.
        last_instant = end.subtract(microseconds=1)
        if local_date(start, self.tz) != local_date(last_instant, self.tz):
            raise InvalidInputError("Window must start and end on the same calendar date")

        return window

    def window_date(self, window: TimeInterval) -> date:
        return local_date(window.start, self.tz)

    @staticmethod
    def is_vetoed(window: TimeInterval, blocks: Iterable[OnetimeBlock]) -> bool:
        """A single overlapping one-time block excludes the employee for the window."""
        for block in blocks:
            block_interval = block.interval
            if block_interval is not None and intervals.overlaps(window, block_interval):
                return True
        return False

    def free_slots(
        self,
        *,
        window: TimeInterval,
        schedule: WeeklySchedule,
        breaks: Iterable[RecurringBreak],
    ) -> List[TimeInterval]:
        """
        Schedule minus breaks, intersected with the window.

        Returns:
            Sorted, non-empty intervals inside ``window``
        """
        day = self.window_date(window)
        schedule_window = schedule.window_for(day, self.tz)
        if schedule_window is None:
            return []

        break_intervals = [
            interval for interval in (item.interval_for(day, self.tz) for item in breaks)
            if interval is not None
        ]

        free = intervals.subtract_all([schedule_window], break_intervals)
        return intervals.sort_intervals(intervals.clip_all(free, window))

    @staticmethod
    def subtract_booked(
        free: Iterable[TimeInterval],
        booked: Iterable[BookedSlot],
    ) -> List[TimeInterval]:
        """Remove already committed work from free intervals."""
        booked_intervals = [
            interval for interval in (slot.interval for slot in booked)
            if interval is not None
        ]
        return intervals.subtract_all(free, booked_intervals)


def _parse_clock(text: str) -> time:
    parts = text.strip().split(":")
    if len(parts) not in (2, 3):
        raise InvalidInputError(f"Invalid time format: {text!r}, use HH:MM")

    try:
        numbers = [int(part) for part in parts]
        return time(*numbers)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid time format: {text!r}, use HH:MM") from exc


def parse_clock_range(text: str, day: date, tz: TimezoneLike) -> TimeInterval:
    """
    Parse a legacy ``HH:MM-HH:MM`` range anchored to ``day``.

    Example: ``"11:00-12:30"`` on 2024-07-01 -> 2024-07-01 11:00 - 12:30
    """
    parts = text.split("-")
    if len(parts) != 2:
        raise InvalidInputError(f"Invalid time range format: {text!r}, use HH:MM-HH:MM")

    start, end = anchor_clock_range(day, _parse_clock(parts[0]), _parse_clock(parts[1]), tz)
    interval = TimeInterval.create(start, end)
    if interval is None:
        raise InvalidInputError(f"Empty time range: {text!r}")
    return interval
