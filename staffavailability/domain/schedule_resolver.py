"""
Selection of the weekly schedule that applies on a given date.
"""

import logging
from datetime import date
from typing import Iterable

from .models import WeeklySchedule
from .timezones import weekday_index

logger = logging.getLogger(__name__)


def select_schedule(rows: Iterable[WeeklySchedule], day: date) -> WeeklySchedule | None:
    """
    Pick the active schedule for ``day`` from candidate rows.

    Rows are expected to be pre-filtered by the collaborator, but the weekday
    and validity window are checked again so stray rows never leak through.
    When several rules are active the one with the latest ``valid_from``
    wins: a later-starting rule supersedes an older one for the same day.

    Returns:
        The applicable schedule, or None when no rule covers ``day``
    """
    day_of_week = weekday_index(day)
    rows = list(rows)

    candidates = [
        row for row in rows
        if row.day_of_week == day_of_week and row.is_active_on(day)
    ]

    if len(candidates) < len(rows):
        logger.warning(
            "Ignoring %d schedule rows that do not apply on %s",
            len(rows) - len(candidates),
            day,
        )

    if not candidates:
        return None

    if len(candidates) > 1:
        logger.debug(
            "%d schedules active on %s, keeping the latest valid_from",
            len(candidates),
            day,
        )

    return max(candidates, key=lambda row: row.valid_from)
