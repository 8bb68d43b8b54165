"""
Snapshot-backed repository for schedules, breaks, blocks and bookings.

Serves the availability service from data held in memory, either built
directly (tests, embedding) or loaded from a JSON export of the salon's
tables.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Set
from uuid import UUID

from pendulum import DateTime

from ..domain.models import BookedSlot, OnetimeBlock, RecurringBreak, WeeklySchedule
from ..domain.timezones import TimezoneLike, day_bounds
from .records import SalonSnapshotRecord

logger = logging.getLogger(__name__)


@dataclass
class SalonSnapshot:
    """Immutable-by-convention copy of everything the engine reads."""
    employee_ids: Set[UUID] = field(default_factory=set)
    capabilities: Dict[UUID, List[UUID]] = field(default_factory=dict)  # service -> employees
    schedules: List[WeeklySchedule] = field(default_factory=list)
    recurring_breaks: List[RecurringBreak] = field(default_factory=list)
    onetime_blocks: List[OnetimeBlock] = field(default_factory=list)
    booked_slots: List[BookedSlot] = field(default_factory=list)

    def add_capability(self, employee_id: UUID, service_id: UUID) -> None:
        employees = self.capabilities.setdefault(service_id, [])
        if employee_id not in employees:
            employees.append(employee_id)


class InMemoryAvailabilityRepository:
    """
    Repository answering every fetch from a ``SalonSnapshot``.

    Filtering mirrors the SQL the persistence layer runs, so the service
    sees the same rows it would see in production.
    """

    def __init__(self, snapshot: SalonSnapshot, tz: TimezoneLike):
        self.snapshot = snapshot
        self.tz = tz

    async def employee_exists(self, employee_id: UUID) -> bool:
        return employee_id in self.snapshot.employee_ids

    async def get_schedule_rows_for_date(
        self,
        employee_id: UUID,
        day_of_week: int,
        day: date,
    ) -> List[WeeklySchedule]:
        rows = [
            row for row in self.snapshot.schedules
            if row.employee_id == employee_id
            and row.day_of_week == day_of_week
            and row.is_active_on(day)
        ]
        return sorted(rows, key=lambda row: row.valid_from, reverse=True)

    async def get_onetime_blocks_overlapping(
        self,
        employee_id: UUID,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[OnetimeBlock]:
        return [
            block for block in self.snapshot.onetime_blocks
            if block.employee_id == employee_id
            and block.start < range_end
            and block.end > range_start
        ]

    async def get_recurring_breaks_for_day(
        self,
        employee_id: UUID,
        day_of_week: int,
    ) -> List[RecurringBreak]:
        return [
            item for item in self.snapshot.recurring_breaks
            if item.employee_id == employee_id and item.day_of_week == day_of_week
        ]

    async def get_booked_slots_for_employee_on_date(
        self,
        employee_id: UUID,
        day: date,
    ) -> List[BookedSlot]:
        start_of_day, end_of_day = day_bounds(day, self.tz)
        return [
            slot for slot in self.snapshot.booked_slots
            if slot.employee_id == employee_id
            and start_of_day <= slot.start <= end_of_day
        ]

    async def get_employees_for_service(self, service_id: UUID) -> List[UUID]:
        return list(self.snapshot.capabilities.get(service_id, []))

    async def get_services_for_employee(self, employee_id: UUID) -> List[UUID]:
        return [
            service_id for service_id, employees in self.snapshot.capabilities.items()
            if employee_id in employees
        ]


def load_snapshot(data_file: Path, tz: TimezoneLike) -> SalonSnapshot:
    """
    Load and validate a salon snapshot from a JSON file.

    Args:
        data_file: Path to the JSON export
        tz: Zone used for date-times stored without an offset

    Returns:
        SalonSnapshot instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid JSON or a record is invalid
    """
    if not data_file.exists():
        raise FileNotFoundError(f"Salon data file not found: {data_file}")

    try:
        with open(data_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {data_file}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Salon data file must contain an object at the root level.")

    record = SalonSnapshotRecord.model_validate(data)

    snapshot = SalonSnapshot(
        employee_ids={employee.id for employee in record.employees},
        schedules=[row.to_domain() for row in record.schedules],
        recurring_breaks=[row.to_domain() for row in record.recurring_breaks],
        onetime_blocks=[row.to_domain(tz) for row in record.onetime_blocks],
        booked_slots=[row.to_domain(tz) for row in record.booked_slots],
    )
    for link in record.employee_services:
        snapshot.add_capability(link.employee_id, link.service_id)

    logger.info(
        "Loaded %d employee(s), %d schedule(s), %d break(s), %d block(s), %d booked slot(s) from %s",
        len(snapshot.employee_ids),
        len(snapshot.schedules),
        len(snapshot.recurring_breaks),
        len(snapshot.onetime_blocks),
        len(snapshot.booked_slots),
        data_file,
    )
    return snapshot
