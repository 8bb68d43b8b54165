"""
Timezone resolution and date/instant conversion helpers.

Every conversion from a calendar date (plus an optional clock time) to an
absolute instant goes through this module so the whole engine shares one
notion of the "local day".
"""

from __future__ import annotations

import logging
from datetime import date, time
from typing import Tuple, Union

import pendulum
from pendulum import DateTime
from pendulum.tz.timezone import FixedTimezone, Timezone

logger = logging.getLogger(__name__)

TimezoneLike = Union[Timezone, FixedTimezone]


def resolve_timezone(name: str, fallback_offset_minutes: int = 0) -> TimezoneLike:
    """
    Load a timezone from the zone database, falling back to a fixed offset.

    Args:
        name: IANA timezone identifier, e.g. ``Asia/Colombo``
        fallback_offset_minutes: UTC offset used when ``name`` cannot be loaded

    Returns:
        A pendulum timezone object
    """
    try:
        return pendulum.timezone(name)
    except (ValueError, LookupError) as exc:
        logger.warning(
            "Timezone %r unavailable (%s), using fixed offset %+d minutes",
            name,
            exc,
            fallback_offset_minutes,
        )
        return pendulum.fixed_timezone(fallback_offset_minutes * 60)


def weekday_index(day: date) -> int:
    """Return the weekday as 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def at_time_of_day(day: date, clock: time, tz: TimezoneLike) -> DateTime:
    """Anchor a clock time to a calendar date in ``tz``."""
    return pendulum.datetime(
        day.year,
        day.month,
        day.day,
        clock.hour,
        clock.minute,
        clock.second,
        tz=tz,
    )


def anchor_clock_range(
    day: date,
    start: time,
    end: time,
    tz: TimezoneLike,
) -> Tuple[DateTime, DateTime]:
    """
    Anchor a clock-time range to ``day``.

    When ``end`` is earlier than ``start`` the range crosses midnight and the
    end instant moves to the next calendar day.
    """
    start_dt = at_time_of_day(day, start, tz)
    end_dt = at_time_of_day(day, end, tz)

    if end < start:
        end_dt = end_dt.add(days=1)

    return start_dt, end_dt


def day_bounds(day: date, tz: TimezoneLike) -> Tuple[DateTime, DateTime]:
    """Return the first and last instant of ``day`` in ``tz``."""
    start = at_time_of_day(day, time(0, 0), tz)
    return start, start.end_of("day")


def local_date(instant: DateTime, tz: TimezoneLike) -> date:
    """Return the calendar date of ``instant`` as seen in ``tz``."""
    return instant.in_timezone(tz).date()
