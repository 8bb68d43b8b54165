"""
Interval algebra shared by the day view and the slot matcher.

All intervals are half-open ``[start, end)``: two intervals that merely
touch do not overlap, and zero-length results are dropped rather than
returned.
"""

from typing import Iterable, List

from .models import TimeInterval, is_valid

__all__ = ["is_valid", "overlaps", "intersect", "subtract", "subtract_all", "clip_all", "sort_intervals"]


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.start < b.end and a.end > b.start


def intersect(a: TimeInterval, b: TimeInterval) -> TimeInterval | None:
    """Return the common part of ``a`` and ``b``, or None."""
    if not overlaps(a, b):
        return None
    return TimeInterval.create(max(a.start, b.start), min(a.end, b.end))


def subtract(available: Iterable[TimeInterval], remove: TimeInterval) -> List[TimeInterval]:
    """
    Remove one interval from every interval in ``available``.

    Each input interval yields zero, one or two output intervals:

    Available: 09:00 - 17:00
    Remove:    12:00 - 13:00
    Result:    [09:00 - 12:00, 13:00 - 17:00]
    """
    result: List[TimeInterval] = []

    for slot in available:
        # No overlap: keep as is
        if slot.end <= remove.start or slot.start >= remove.end:
            result.append(slot)
            continue

        if remove.start <= slot.start:
            # Covers the left edge, possibly the whole slot
            if remove.end < slot.end:
                result.append(TimeInterval(start=remove.end, end=slot.end))
        elif remove.end >= slot.end:
            # Covers the right edge only
            result.append(TimeInterval(start=slot.start, end=remove.start))
        else:
            # Strictly inside: split in two
            result.append(TimeInterval(start=slot.start, end=remove.start))
            result.append(TimeInterval(start=remove.end, end=slot.end))

    return result


def subtract_all(
    available: Iterable[TimeInterval],
    removals: Iterable[TimeInterval],
) -> List[TimeInterval]:
    """
    Remove every interval in ``removals`` from ``available``.

    Removals are applied one at a time, each pass feeding the next, since
    they may be non-contiguous. The final result does not depend on order.
    """
    result = list(available)

    for remove in removals:
        if not result:
            break
        result = subtract(result, remove)

    return result


def clip_all(intervals: Iterable[TimeInterval], bounds: TimeInterval) -> List[TimeInterval]:
    """Intersect every interval with ``bounds``, keeping non-empty results."""
    clipped: List[TimeInterval] = []

    for interval in intervals:
        common = intersect(interval, bounds)
        if common is not None:
            clipped.append(common)

    return clipped


def sort_intervals(intervals: Iterable[TimeInterval]) -> List[TimeInterval]:
    return sorted(intervals, key=lambda interval: (interval.start, interval.end))
