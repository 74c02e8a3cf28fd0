from __future__ import annotations

from datetime import date, time, timedelta
from typing import Iterator


def time_to_minutes(t: time) -> int:
    """
    Convert time to minutes since midnight.

    Args:
        t: Time object.

    Returns:
        Minutes since midnight (0-1439).
    """
    return t.hour * 60 + t.minute


def format_hh_mm(t: time) -> str:
    """Render a wall-clock time as HH:mm."""
    return f"{t.hour:02d}:{t.minute:02d}"


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar date from ``start`` to ``end`` inclusive."""
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def count_weekday_matches(start: date, end: date, weekdays: frozenset[int]) -> int:
    """
    Count dates in [start, end] whose ISO weekday is in ``weekdays``.

    Computed arithmetically so an oversized range can be rejected before
    any date is materialized.
    """
    if end < start or not weekdays:
        return 0
    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * len(weekdays)
    first = start.isoweekday()
    for offset in range(remainder):
        if ((first - 1 + offset) % 7) + 1 in weekdays:
            count += 1
    return count
