"""
Domain layer - Pure availability logic without external dependencies.
"""

from .day_availability import DayAvailabilityBuilder
from .models import (
    BookedSlot,
    DayAvailability,
    EmployeeMatch,
    OnetimeBlock,
    ReasonedInterval,
    RecurringBreak,
    SlotFormat,
    TimeInterval,
    WeeklySchedule,
)
from .schedule_resolver import select_schedule
from .slot_matcher import SlotMatcher, parse_clock_range

__all__ = [
    "BookedSlot",
    "DayAvailability",
    "DayAvailabilityBuilder",
    "EmployeeMatch",
    "OnetimeBlock",
    "ReasonedInterval",
    "RecurringBreak",
    "SlotFormat",
    "SlotMatcher",
    "TimeInterval",
    "WeeklySchedule",
    "parse_clock_range",
    "select_schedule",
]
