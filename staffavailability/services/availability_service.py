"""
Application services for staff availability.

The service coordinates the data fetches through a repository protocol and
delegates the interval work to the domain-level ``DayAvailabilityBuilder``
and ``SlotMatcher``. Depending on a protocol keeps the service independent
of where schedules, breaks, blocks and bookings actually live.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, Dict, List, Optional, Protocol, Sequence, TypeVar
from uuid import UUID

import pendulum
from pendulum import DateTime

from ..domain.day_availability import DayAvailabilityBuilder
from ..domain.exceptions import (
    AvailabilityError,
    CollaboratorError,
    EmployeeNotFoundError,
    InvalidInputError,
    NoScheduleForDateError,
)
from ..domain.models import (
    BookedSlot,
    DayAvailability,
    EmployeeMatch,
    OnetimeBlock,
    RecurringBreak,
    TimeInterval,
    WeeklySchedule,
)
from ..domain.schedule_resolver import select_schedule
from ..domain.slot_matcher import SlotMatcher
from ..domain.timezones import TimezoneLike, day_bounds, weekday_index
from ..schemas import DayAvailabilityQuery, SlotMatchQuery, validate_query

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AvailabilityRepositoryProtocol(Protocol):
    """Protocol describing the data fetches needed by the service."""

    async def employee_exists(self, employee_id: UUID) -> bool:
        """Return whether the employee exists."""

    async def get_schedule_rows_for_date(
        self,
        employee_id: UUID,
        day_of_week: int,
        day: date,
    ) -> List[WeeklySchedule]:
        """Return schedule rows for the weekday that are valid on ``day``."""

    async def get_onetime_blocks_overlapping(
        self,
        employee_id: UUID,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[OnetimeBlock]:
        """Return one-time blocks overlapping ``[range_start, range_end]``."""

    async def get_recurring_breaks_for_day(
        self,
        employee_id: UUID,
        day_of_week: int,
    ) -> List[RecurringBreak]:
        """Return recurring breaks for the weekday."""

    async def get_booked_slots_for_employee_on_date(
        self,
        employee_id: UUID,
        day: date,
    ) -> List[BookedSlot]:
        """Return booked slots starting on ``day``."""

    async def get_employees_for_service(self, service_id: UUID) -> List[UUID]:
        """Return employees able to perform the service."""

    async def get_services_for_employee(self, employee_id: UUID) -> List[UUID]:
        """
        Return services the employee can perform.

        Inverse of ``get_employees_for_service``. The engine itself matches
        from services to employees and never calls this; it is part of the
        contract for collaborators that need the per-employee view.
        """


class AvailabilityService:
    """
    Entry points for the full-day view and window-scoped matching.

    The service holds no state between calls; each invocation reads fresh
    snapshots from the repository and either returns a complete result or
    raises an ``AvailabilityError``.
    """

    def __init__(
        self,
        repository: AvailabilityRepositoryProtocol,
        tz: TimezoneLike,
        max_days_ahead: Optional[int] = None,
    ) -> None:
        self._repository = repository
        self._tz = tz
        self._max_days_ahead = max_days_ahead
        self._day_builder = DayAvailabilityBuilder(tz)
        self._slot_matcher = SlotMatcher(tz)

    @property
    def timezone(self) -> TimezoneLike:
        return self._tz

    async def resolve_schedule(self, employee_id: UUID, day: date) -> WeeklySchedule | None:
        """Return the weekly schedule applying to ``day``, or None."""
        rows = await self._fetch(
            "schedule rows",
            self._repository.get_schedule_rows_for_date(employee_id, weekday_index(day), day),
        )
        return select_schedule(rows, day)

    async def get_day_availability(self, employee_id: Any, day: Any) -> DayAvailability:
        """
        Build the full-day availability view for an employee.

        Args:
            employee_id: Employee UUID (or its string form)
            day: Date, or an ISO-8601 date / date-time string

        Raises:
            InvalidInputError: Malformed identifier or date
            EmployeeNotFoundError: Unknown employee
            NoScheduleForDateError: No weekly schedule applies on the date
            CollaboratorError: A data fetch failed
        """
        query = validate_query(
            DayAvailabilityQuery,
            context={"tz": self._tz},
            employee_id=employee_id,
            day=day,
        )
        self._check_date_range(query.day)

        exists = await self._fetch("employee lookup", self._repository.employee_exists(query.employee_id))
        if not exists:
            raise EmployeeNotFoundError(query.employee_id)

        schedule = await self.resolve_schedule(query.employee_id, query.day)
        window = self._day_builder.schedule_window(query.day, schedule) if schedule else None
        if window is None:
            raise NoScheduleForDateError(query.employee_id, query.day)

        # Cover the whole calendar day, and the next morning for night shifts
        day_start, day_end = day_bounds(query.day, self._tz)
        range_start = min(day_start, window.start)
        range_end = max(day_end, window.end)

        blocks, breaks = await asyncio.gather(
            self._fetch(
                "one-time blocks",
                self._repository.get_onetime_blocks_overlapping(query.employee_id, range_start, range_end),
            ),
            self._fetch(
                "recurring breaks",
                self._repository.get_recurring_breaks_for_day(query.employee_id, weekday_index(query.day)),
            ),
        )

        availability = self._day_builder.build(
            employee_id=query.employee_id,
            day=query.day,
            schedule_window=window,
            blocks=blocks,
            breaks=breaks,
        )

        logger.info(
            "Availability for %s on %s: %d block(s), %d break(s)",
            query.employee_id,
            query.day,
            len(availability.blocks),
            len(availability.breaks),
        )
        return availability

    async def match_employees(
        self,
        service_ids: Sequence[Any],
        window_start: Any,
        window_end: Any,
    ) -> List[EmployeeMatch]:
        """
        Find employees with free time for at least one service in the window.

        Employees blocked by a one-time block, without a schedule, or left
        with no free interval are omitted rather than returned empty.
        """
        return await self._match(service_ids, window_start, window_end, subtract_bookings=False)

    async def find_bookable_employees(
        self,
        service_ids: Sequence[Any],
        window_start: Any,
        window_end: Any,
    ) -> List[EmployeeMatch]:
        """
        Booking-side variant of ``match_employees``.

        Already booked slots are removed from each candidate's free time
        before the emptiness check.
        """
        return await self._match(service_ids, window_start, window_end, subtract_bookings=True)

    async def _match(
        self,
        service_ids: Sequence[Any],
        window_start: Any,
        window_end: Any,
        *,
        subtract_bookings: bool,
    ) -> List[EmployeeMatch]:
        query = validate_query(
            SlotMatchQuery,
            service_ids=list(service_ids),
            start=window_start,
            end=window_end,
        )
        start, end = query.window_bounds(self._tz)
        window = self._slot_matcher.validate_window(start, end)

        candidates = await self._candidate_services(query.service_ids)
        if not candidates:
            logger.info("No employee offers any of %d requested service(s)", len(query.service_ids))
            return []

        results = await asyncio.gather(
            *(
                self._free_slots_for(employee_id, window, subtract_bookings=subtract_bookings)
                for employee_id in candidates
            )
        )

        matches = [
            EmployeeMatch(employee_id=employee_id, service_ids=services, free_slots=free)
            for (employee_id, services), free in zip(candidates.items(), results)
            if free
        ]

        logger.info(
            "Window %s: %d of %d candidate(s) available",
            window,
            len(matches),
            len(candidates),
        )
        return matches

    async def _candidate_services(self, service_ids: Sequence[UUID]) -> Dict[UUID, List[UUID]]:
        """Map each qualified employee to the requested services they can perform."""
        employee_lists = await asyncio.gather(
            *(
                self._fetch("service capabilities", self._repository.get_employees_for_service(service_id))
                for service_id in service_ids
            )
        )

        candidates: Dict[UUID, List[UUID]] = {}
        for service_id, employee_ids in zip(service_ids, employee_lists):
            for employee_id in employee_ids:
                services = candidates.setdefault(employee_id, [])
                if service_id not in services:
                    services.append(service_id)

        return candidates

    async def _free_slots_for(
        self,
        employee_id: UUID,
        window: TimeInterval,
        *,
        subtract_bookings: bool,
    ) -> List[TimeInterval]:
        blocks = await self._fetch(
            "one-time blocks",
            self._repository.get_onetime_blocks_overlapping(employee_id, window.start, window.end),
        )
        if self._slot_matcher.is_vetoed(window, blocks):
            logger.debug("Employee %s blocked during %s", employee_id, window)
            return []

        day = self._slot_matcher.window_date(window)
        schedule = await self.resolve_schedule(employee_id, day)
        if schedule is None:
            logger.debug("Employee %s has no schedule on %s", employee_id, day)
            return []

        breaks = await self._fetch(
            "recurring breaks",
            self._repository.get_recurring_breaks_for_day(employee_id, weekday_index(day)),
        )
        free = self._slot_matcher.free_slots(window=window, schedule=schedule, breaks=breaks)

        if subtract_bookings and free:
            booked = await self._fetch(
                "booked slots",
                self._repository.get_booked_slots_for_employee_on_date(employee_id, day),
            )
            free = self._slot_matcher.subtract_booked(free, booked)

        return free

    def _check_date_range(self, day: date) -> None:
        if self._max_days_ahead is None:
            return

        latest = pendulum.today(self._tz).date().add(days=self._max_days_ahead)
        if day > latest:
            raise InvalidInputError(
                f"date is too far in the future (maximum {self._max_days_ahead} days ahead)"
            )

    @staticmethod
    async def _fetch(what: str, call: Awaitable[T]) -> T:
        """
        Await a repository call, wrapping unexpected failures.

        Nothing is retried; the failure is reported immediately.
        """
        try:
            return await call
        except AvailabilityError:
            raise
        except Exception as exc:
            logger.error("Failed to fetch %s: %s", what, exc)
            raise CollaboratorError(f"Failed to fetch {what}: {exc}") from exc
