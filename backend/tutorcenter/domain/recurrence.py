"""
Occurrence enumeration for weekly recurrence rules.

Expands a ``GenerationRequest`` into the ordered list of concrete session
instants it describes. Enumeration is stateless: calling it twice with the
same request yields equal lists, which is what lets preview and commit agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
import logging
from typing import List, Optional

import pytz

from ..core.exceptions import (
    EmptyWeekdaySelection,
    InvalidDateRange,
    OccurrenceLimitExceeded,
)
from ..core.timezone_utils import get_zone, localize_wall_clock
from ..utils.time_utils import count_weekday_matches, format_hh_mm, iter_dates
from .generation import GenerationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Occurrence:
    """One concrete session instant produced by a recurrence rule."""

    local_date: date
    start_at: datetime
    end_at: datetime


def check_expansion_limits(
    request: GenerationRequest,
    *,
    max_occurrences: Optional[int],
    max_range_days: Optional[int],
) -> int:
    """
    Reject rules whose expansion is empty-by-construction or too large.

    Returns:
        The number of dates the rule selects

    Raises:
        EmptyWeekdaySelection: No weekday selected
        InvalidDateRange: endDate precedes startDate
        OccurrenceLimitExceeded: Range or occurrence count above the ceiling
    """
    if not request.weekdays:
        raise EmptyWeekdaySelection()
    if request.end_date < request.start_date:
        raise InvalidDateRange(request.start_date.isoformat(), request.end_date.isoformat())

    span_days = (request.end_date - request.start_date).days + 1
    if max_range_days is not None and span_days > max_range_days:
        raise OccurrenceLimitExceeded(limit=max_range_days, requested=span_days, unit="days")

    selected = count_weekday_matches(request.start_date, request.end_date, request.weekdays)
    if max_occurrences is not None and selected > max_occurrences:
        raise OccurrenceLimitExceeded(limit=max_occurrences, requested=selected, unit="occurrences")
    return selected


def enumerate_occurrences(
    request: GenerationRequest,
    *,
    max_occurrences: Optional[int] = None,
    max_range_days: Optional[int] = None,
) -> List[Occurrence]:
    """
    Expand a recurrence rule into occurrences ordered by start instant.

    Every local date in [startDate, endDate] whose ISO weekday is selected
    yields exactly one occurrence. Start and end wall-clock times are resolved
    independently in the request's timezone, so the DST edge policy applies
    to each. When a spring-forward gap swallows both ends of a session they
    resolve to the same instant; that occurrence keeps its wall-clock duration
    from the shifted start instead.

    Raises:
        EmptyWeekdaySelection: No weekday selected
        InvalidDateRange: endDate precedes startDate
        OccurrenceLimitExceeded: Expansion above the configured ceiling
    """
    check_expansion_limits(
        request, max_occurrences=max_occurrences, max_range_days=max_range_days
    )

    zone = get_zone(request.timezone)
    wall_duration = datetime.combine(date.min, request.end_time) - datetime.combine(
        date.min, request.start_time
    )
    occurrences: List[Occurrence] = []
    for day in iter_dates(request.start_date, request.end_date):
        if day.isoweekday() not in request.weekdays:
            continue
        start_at = localize_wall_clock(zone, datetime.combine(day, request.start_time)).astimezone(
            pytz.UTC
        )
        end_at = localize_wall_clock(zone, datetime.combine(day, request.end_time)).astimezone(
            pytz.UTC
        )
        if end_at <= start_at:
            end_at = start_at + wall_duration
            logger.debug(
                "Session on %s %s-%s collapsed by a DST gap in %s; keeping its duration",
                day,
                format_hh_mm(request.start_time),
                format_hh_mm(request.end_time),
                request.timezone,
            )
        occurrences.append(Occurrence(local_date=day, start_at=start_at, end_at=end_at))

    occurrences.sort(key=lambda occ: (occ.start_at, occ.local_date))
    logger.debug(
        "Enumerated %d occurrences for %s..%s in %s",
        len(occurrences),
        request.start_date,
        request.end_date,
        request.timezone,
    )
    return occurrences
