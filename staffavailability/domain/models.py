"""
Domain models for staff schedules and availability results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pendulum import DateTime

from .timezones import TimezoneLike, anchor_clock_range


class SlotFormat(str, Enum):
    """Serialized shape of a list of free intervals."""

    ISO = "iso"
    CLOCK = "clock"


def is_valid(start: DateTime, end: DateTime) -> bool:
    """Check whether ``start``/``end`` would form a non-empty interval."""
    return start < end


@dataclass(frozen=True)
class TimeInterval:
    """
    Represents an immutable half-open interval ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if not is_valid(self.start, self.end):
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    @classmethod
    def create(cls, start: DateTime, end: DateTime) -> "TimeInterval | None":
        """Build an interval, or return None when ``start >= end``."""
        if not is_valid(start, end):
            return None
        return cls(start=start, end=end)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def contains(self, other: "TimeInterval") -> bool:
        """Check whether ``other`` lies completely inside this interval."""
        return self.start <= other.start and other.end <= self.end

    def format_clock(self, tz: TimezoneLike) -> str:
        """Format as ``HH:MM-HH:MM`` wall-clock times in ``tz``."""
        start = self.start.in_timezone(tz)
        end = self.end.in_timezone(tz)
        return f"{start.format('HH:mm')}-{end.format('HH:mm')}"

    def to_dict(self, tz: TimezoneLike | None = None) -> Dict[str, str]:
        """Serialize as ISO-8601 stamps, optionally converted to ``tz``."""
        start, end = self.start, self.end
        if tz is not None:
            start, end = start.in_timezone(tz), end.in_timezone(tz)
        return {"start": start.to_iso8601_string(), "end": end.to_iso8601_string()}

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class WeeklySchedule:
    """
    A standing working-hours rule for one weekday.

    The rule applies between ``valid_from`` and ``valid_until`` inclusive; an
    empty ``valid_until`` means the rule never expires.
    """
    employee_id: UUID
    day_of_week: int  # 0=Sunday, 6=Saturday
    start_time: time
    end_time: time
    valid_from: date
    valid_until: Optional[date] = None
    id: Optional[UUID] = None
    notes: str = ""

    def crosses_midnight(self) -> bool:
        return self.end_time < self.start_time

    def is_active_on(self, day: date) -> bool:
        """Check whether the validity window includes ``day``."""
        if self.valid_from > day:
            return False
        return self.valid_until is None or self.valid_until >= day

    def window_for(self, day: date, tz: TimezoneLike) -> TimeInterval | None:
        """Anchor the working hours to ``day``. None for a zero-length rule."""
        start, end = anchor_clock_range(day, self.start_time, self.end_time, tz)
        return TimeInterval.create(start, end)


@dataclass(frozen=True)
class RecurringBreak:
    """A break repeating every week on ``day_of_week``."""
    employee_id: UUID
    day_of_week: int
    start_time: time
    end_time: time
    reason: str
    id: Optional[UUID] = None

    def interval_for(self, day: date, tz: TimezoneLike) -> TimeInterval | None:
        start, end = anchor_clock_range(day, self.start_time, self.end_time, tz)
        return TimeInterval.create(start, end)


@dataclass(frozen=True)
class OnetimeBlock:
    """An absolute, possibly multi-day, period of unavailability."""
    employee_id: UUID
    start: DateTime
    end: DateTime
    reason: str = ""
    id: Optional[UUID] = None

    @property
    def interval(self) -> TimeInterval | None:
        return TimeInterval.create(self.start, self.end)


@dataclass(frozen=True)
class BookedSlot:
    """Already committed work supplied by the booking side."""
    employee_id: UUID
    start: DateTime
    end: DateTime
    service_id: UUID
    booking_id: Optional[UUID] = None

    @property
    def interval(self) -> TimeInterval | None:
        return TimeInterval.create(self.start, self.end)


@dataclass(frozen=True)
class ReasonedInterval:
    """A block or break clipped to the schedule window, tagged with its reason."""
    interval: TimeInterval
    reason: str

    def to_dict(self, tz: TimezoneLike | None = None) -> Dict[str, str]:
        stamps = self.interval.to_dict(tz)
        return {
            "start_time": stamps["start"],
            "end_time": stamps["end"],
            "reason": self.reason,
        }


@dataclass
class DayAvailability:
    """
    The full-day view for one employee.

    Blocks are clipped to the schedule window; breaks are clipped and have
    had every overlapping block removed from them.
    """
    employee_id: UUID
    day: date
    schedule_window: TimeInterval
    blocks: List[ReasonedInterval] = field(default_factory=list)
    breaks: List[ReasonedInterval] = field(default_factory=list)

    def to_dict(self, tz: TimezoneLike | None = None) -> Dict[str, Any]:
        window = self.schedule_window.to_dict(tz)
        return {
            "date": self.day.isoformat(),
            "employee_id": str(self.employee_id),
            "schedule": {"start_time": window["start"], "end_time": window["end"]},
            "onetimeblocks": [block.to_dict(tz) for block in self.blocks],
            "breaks": [item.to_dict(tz) for item in self.breaks],
        }


@dataclass
class EmployeeMatch:
    """An employee able to take part of a request, with free intervals in the window."""
    employee_id: UUID
    service_ids: List[UUID]
    free_slots: List[TimeInterval]

    def to_dict(self, style: SlotFormat, tz: TimezoneLike) -> Dict[str, Any]:
        """
        Serialize the match.

        ``SlotFormat.CLOCK`` produces the legacy shape with ``HH:MM-HH:MM``
        strings; ``SlotFormat.ISO`` produces full date-time stamps.
        """
        service_ids = [str(service_id) for service_id in self.service_ids]

        if style is SlotFormat.CLOCK:
            return {
                "employeeid": str(self.employee_id),
                "service": service_ids,
                "EWT": [slot.format_clock(tz) for slot in self.free_slots],
            }

        return {
            "staffId": str(self.employee_id),
            "serviceIds": service_ids,
            "availability": [slot.to_dict(tz) for slot in self.free_slots],
        }
