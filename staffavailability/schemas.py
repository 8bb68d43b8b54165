"""
Boundary query models, validated before anything reaches the engine.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Type, TypeVar
from uuid import UUID

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from .domain.exceptions import InvalidInputError
from .domain.timezones import TimezoneLike

QueryT = TypeVar("QueryT", bound=BaseModel)


def parse_day(value: Any, tz: Optional[TimezoneLike] = None) -> date:
    """
    Accept a ``YYYY-MM-DD`` date or a full ISO-8601 date-time.

    An aware date-time is converted to ``tz`` before taking its calendar
    date, so the same instant maps to the same day everywhere in the
    engine. Naive date-times keep their own date.
    """
    if isinstance(value, datetime):
        return _calendar_date(value, tz)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("date must be a string in ISO 8601 format")

    # Strings without an offset are read as wall-clock time in ``tz``
    options: Dict[str, Any] = {"tz": tz} if tz is not None else {}
    try:
        parsed = pendulum.parse(value.strip(), exact=True, **options)
    except ValueError as exc:
        raise ValueError(
            "invalid date format. Expected ISO 8601 format "
            "(e.g., '2025-06-10' or '2025-06-10T00:00:00Z')"
        ) from exc

    if isinstance(parsed, DateTime):
        return _calendar_date(parsed, tz)
    if isinstance(parsed, date):
        return parsed
    raise ValueError(f"Expected a date, got {value!r}")


def _calendar_date(value: datetime, tz: Optional[TimezoneLike]) -> date:
    if tz is None or value.tzinfo is None:
        return value.date()
    return pendulum.instance(value).in_timezone(tz).date()


class DayAvailabilityQuery(BaseModel):
    """Request for the full-day view of one employee."""
    employee_id: UUID
    day: date

    @field_validator("day", mode="before")
    @classmethod
    def validate_day(cls, value: Any, info: ValidationInfo) -> date:
        tz = info.context.get("tz") if info.context else None
        return parse_day(value, tz)


class SlotMatchQuery(BaseModel):
    """Request for employees able to take services within a window."""
    service_ids: List[UUID] = Field(min_length=1)
    start: datetime
    end: datetime

    @field_validator("service_ids")
    @classmethod
    def dedupe_service_ids(cls, value: List[UUID]) -> List[UUID]:
        """Drop repeated service ids, keeping first-seen order."""
        seen: set[UUID] = set()
        deduped: List[UUID] = []
        for service_id in value:
            if service_id not in seen:
                deduped.append(service_id)
                seen.add(service_id)
        return deduped

    def window_bounds(self, tz: TimezoneLike) -> tuple[DateTime, DateTime]:
        """Return start/end as aware instants; naive values are read in ``tz``."""
        return pendulum.instance(self.start, tz=tz), pendulum.instance(self.end, tz=tz)


def validate_query(model: Type[QueryT], context: Optional[Dict[str, Any]] = None, **data: Any) -> QueryT:
    """
    Build a query model, turning validation failures into ``InvalidInputError``.

    ``context`` is handed to the field validators; ``{"tz": ...}`` sets the
    operating timezone used to read date-times.
    """
    try:
        return model.model_validate(data, context=context)
    except ValidationError as exc:
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = f"{location}: {first.get('msg')}" if location else first.get("msg")
        else:
            message = str(exc)
        raise InvalidInputError(message) from exc
