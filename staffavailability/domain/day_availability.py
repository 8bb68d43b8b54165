"""
Full-day availability view for a single employee.

Pure domain logic: the caller fetches the schedule, blocks and breaks and
hands them over; nothing here performs I/O.
"""

from datetime import date
from typing import Iterable, List
from uuid import UUID

from . import intervals
from .models import (
    DayAvailability,
    OnetimeBlock,
    ReasonedInterval,
    RecurringBreak,
    TimeInterval,
    WeeklySchedule,
)
from .timezones import TimezoneLike


class DayAvailabilityBuilder:
    """
    Combines a resolved schedule with one-time blocks and recurring breaks.

    Algorithm:
    1. Anchor the schedule's clock times to the date (the schedule window)
    2. Clip every one-time block to the schedule window
    3. Anchor every recurring break to the date and clip it to the window
    4. Remove all overlapping blocks from each break (blocks always win)
    5. Return the window, the clipped blocks and the remaining breaks
    """

    def __init__(self, tz: TimezoneLike):
        self.tz = tz

    def schedule_window(self, day: date, schedule: WeeklySchedule) -> TimeInterval | None:
        return schedule.window_for(day, self.tz)

    def build(
        self,
        *,
        employee_id: UUID,
        day: date,
        schedule_window: TimeInterval,
        blocks: Iterable[OnetimeBlock],
        breaks: Iterable[RecurringBreak],
    ) -> DayAvailability:
        """
        Build the structured day view.

        Args:
            employee_id: Employee the view is for
            day: Calendar date in the operating timezone
            schedule_window: The day's anchored working hours
            blocks: One-time blocks overlapping the day
            breaks: Recurring breaks for the day's weekday

        Returns:
            DayAvailability whose block and break lists are always lists
        """
        clipped_blocks = self._clip_blocks(schedule_window, blocks)
        clipped_breaks = self._clip_breaks(day, schedule_window, breaks)

        return DayAvailability(
            employee_id=employee_id,
            day=day,
            schedule_window=schedule_window,
            blocks=clipped_blocks,
            breaks=self.resolve_break_conflicts(clipped_breaks, clipped_blocks),
        )

    def _clip_blocks(
        self,
        window: TimeInterval,
        blocks: Iterable[OnetimeBlock],
    ) -> List[ReasonedInterval]:
        clipped: List[ReasonedInterval] = []

        for block in blocks:
            block_interval = block.interval
            if block_interval is None:
                continue

            common = intervals.intersect(window, block_interval)
            if common is not None:
                clipped.append(ReasonedInterval(interval=common, reason=block.reason))

        return clipped

    def _clip_breaks(
        self,
        day: date,
        window: TimeInterval,
        breaks: Iterable[RecurringBreak],
    ) -> List[ReasonedInterval]:
        clipped: List[ReasonedInterval] = []

        for recurring in breaks:
            break_interval = recurring.interval_for(day, self.tz)
            if break_interval is None:
                continue

            common = intervals.intersect(window, break_interval)
            if common is not None:
                clipped.append(ReasonedInterval(interval=common, reason=recurring.reason))

        return clipped

    @staticmethod
    def resolve_break_conflicts(
        breaks: Iterable[ReasonedInterval],
        blocks: Iterable[ReasonedInterval],
    ) -> List[ReasonedInterval]:
        """
        Trim or split breaks around one-time blocks.

        A break may survive unchanged, shrink, split in two or vanish. Every
        surviving piece keeps the original break's reason.
        """
        block_intervals = [block.interval for block in blocks]
        resolved: List[ReasonedInterval] = []

        for item in breaks:
            conflicts = [
                block for block in block_intervals
                if intervals.overlaps(item.interval, block)
            ]

            if not conflicts:
                resolved.append(item)
                continue

            for piece in intervals.subtract_all([item.interval], conflicts):
                resolved.append(ReasonedInterval(interval=piece, reason=item.reason))

        return resolved
