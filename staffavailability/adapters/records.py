"""
Validated record shapes for the salon data snapshot.

Each record mirrors one stored row and converts itself into the matching
domain model. Validation follows the rules the CRUD side enforces when the
rows are written.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, List, Optional
from uuid import UUID

import pendulum
from pydantic import BaseModel, Field, field_validator, model_validator

from ..domain.models import BookedSlot, OnetimeBlock, RecurringBreak, WeeklySchedule
from ..domain.timezones import TimezoneLike


def parse_clock_time(value: Any) -> time:
    """Accept ``HH:MM:SS`` or ``HH:MM``."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise ValueError("time must be a string, use HH:MM:SS or HH:MM")

    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue

    raise ValueError(f"invalid time format {value!r}, use HH:MM:SS or HH:MM")


def _validate_day_of_week(value: int) -> int:
    if not 0 <= value <= 6:
        raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
    return value


class EmployeeRecord(BaseModel):
    id: UUID
    first_name: str = ""
    last_name: str = ""
    is_active: bool = True


class EmployeeServiceRecord(BaseModel):
    employee_id: UUID
    service_id: UUID


class ClockRangeRecord(BaseModel):
    """Shared rules for rows holding a weekday and a clock-time range."""
    employee_id: UUID
    day_of_week: int
    start_time: time
    end_time: time

    @field_validator("day_of_week")
    @classmethod
    def validate_day_of_week(cls, value: int) -> int:
        return _validate_day_of_week(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_clock(cls, value: Any) -> time:
        return parse_clock_time(value)

    @model_validator(mode="after")
    def validate_times(self) -> "ClockRangeRecord":
        """End may precede start (crossing midnight) but may not equal it."""
        if self.start_time == self.end_time:
            raise ValueError("start_time and end_time cannot be the same")
        return self


class ScheduleRecord(ClockRangeRecord):
    id: Optional[UUID] = None
    valid_from: date
    valid_until: Optional[date] = None
    notes: str = ""

    @field_validator("valid_until", mode="before")
    @classmethod
    def normalize_valid_until(cls, value: Any) -> Any:
        """Treat ``""`` and ``"null"`` as an open-ended rule."""
        if value in ("", "null"):
            return None
        return value

    @model_validator(mode="after")
    def validate_dates(self) -> "ScheduleRecord":
        if self.valid_until is not None and self.valid_until < self.valid_from:
            raise ValueError("valid_until must be after or equal to valid_from")
        return self

    def to_domain(self) -> WeeklySchedule:
        return WeeklySchedule(
            employee_id=self.employee_id,
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
            valid_from=self.valid_from,
            valid_until=self.valid_until,
            id=self.id,
            notes=self.notes,
        )


class RecurringBreakRecord(ClockRangeRecord):
    id: Optional[UUID] = None
    reason: str = Field(min_length=1)

    def to_domain(self) -> RecurringBreak:
        return RecurringBreak(
            employee_id=self.employee_id,
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
            reason=self.reason,
            id=self.id,
        )


class OnetimeBlockRecord(BaseModel):
    id: Optional[UUID] = None
    employee_id: UUID
    start_date_time: datetime
    end_date_time: datetime
    reason: str = ""

    def to_domain(self, tz: TimezoneLike) -> OnetimeBlock:
        start = pendulum.instance(self.start_date_time, tz=tz)
        end = pendulum.instance(self.end_date_time, tz=tz)
        if start >= end:
            raise ValueError(f"One-time block {self.id}: start must be before end")
        return OnetimeBlock(
            employee_id=self.employee_id,
            start=start,
            end=end,
            reason=self.reason,
            id=self.id,
        )


class BookedSlotRecord(BaseModel):
    id: Optional[UUID] = None
    booking_id: Optional[UUID] = None
    staff_id: UUID
    service_id: UUID
    start_time: datetime
    end_time: datetime

    def to_domain(self, tz: TimezoneLike) -> BookedSlot:
        start = pendulum.instance(self.start_time, tz=tz)
        end = pendulum.instance(self.end_time, tz=tz)
        if start >= end:
            raise ValueError(f"Booked slot {self.id}: start must be before end")
        return BookedSlot(
            employee_id=self.staff_id,
            start=start,
            end=end,
            service_id=self.service_id,
            booking_id=self.booking_id,
        )


class SalonSnapshotRecord(BaseModel):
    """Root of the snapshot file."""
    employees: List[EmployeeRecord] = Field(default_factory=list)
    employee_services: List[EmployeeServiceRecord] = Field(default_factory=list)
    schedules: List[ScheduleRecord] = Field(default_factory=list)
    recurring_breaks: List[RecurringBreakRecord] = Field(default_factory=list)
    onetime_blocks: List[OnetimeBlockRecord] = Field(default_factory=list)
    booked_slots: List[BookedSlotRecord] = Field(default_factory=list)

    @field_validator("employees")
    @classmethod
    def validate_unique_employees(cls, value: List[EmployeeRecord]) -> List[EmployeeRecord]:
        seen: set[UUID] = set()
        for employee in value:
            if employee.id in seen:
                raise ValueError(f"Duplicate employee id detected: {employee.id}")
            seen.add(employee.id)
        return value
