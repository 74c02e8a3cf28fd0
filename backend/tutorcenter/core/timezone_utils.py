"""
Timezone utilities for the tutoring-center backend.

Resolves local wall-clock inputs (IANA zone, calendar date, HH:mm time) into
absolute UTC instants. Every conversion in the generation engine goes through
``resolve_local_instant`` so the DST edge policy lives in one place:

- a wall-clock time inside a spring-forward gap resolves to the first minute
  that exists at or after it;
- a wall-clock time inside a fall-back overlap resolves to the earlier of the
  two UTC instants.
"""

from datetime import date, datetime, time, timedelta
from functools import lru_cache
import re
from typing import Optional, Union

import pytz
from pytz.tzinfo import BaseTzInfo

from .constants import DATE_ONLY_PATTERN, TIME_HH_MM_PATTERN
from .exceptions import InvalidLocalTime, InvalidTimeZone

DATE_ONLY_REGEX = re.compile(DATE_ONLY_PATTERN)
TIME_HH_MM_REGEX = re.compile(TIME_HH_MM_PATTERN)

# Longest wall-clock gap on record is a skipped calendar day (Pacific/Apia, 2011).
MAX_GAP = timedelta(hours=48)

LocalDate = Union[str, date]
LocalTime = Union[str, time]


@lru_cache(maxsize=256)
def get_zone(timezone_name: str) -> BaseTzInfo:
    """
    Look up an IANA timezone.

    Args:
        timezone_name: IANA zone name such as "America/New_York"

    Returns:
        pytz timezone object

    Raises:
        InvalidTimeZone: If the name is empty or unknown to the tz database
    """
    candidate = (timezone_name or "").strip()
    if not candidate:
        raise InvalidTimeZone(timezone_name)
    try:
        return pytz.timezone(candidate)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimeZone(timezone_name)


def parse_local_date(value: LocalDate, field: str = "date") -> date:
    """Parse a YYYY-MM-DD calendar date."""
    if isinstance(value, datetime):
        raise InvalidLocalTime(str(value), field=field, expected="YYYY-MM-DD")
    if isinstance(value, date):
        return value
    candidate = (value or "").strip()
    if not DATE_ONLY_REGEX.fullmatch(candidate):
        raise InvalidLocalTime(value, field=field, expected="YYYY-MM-DD")
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        raise InvalidLocalTime(value, field=field, expected="YYYY-MM-DD")


def parse_local_time(value: LocalTime, field: str = "time") -> time:
    """Parse a 24-hour HH:mm wall-clock time."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    candidate = (value or "").strip()
    if not TIME_HH_MM_REGEX.fullmatch(candidate):
        raise InvalidLocalTime(value, field=field, expected="HH:mm")
    hour, minute = candidate.split(":")
    return time(int(hour), int(minute))


def _localize_strict(zone: BaseTzInfo, wall_clock: datetime) -> Optional[datetime]:
    """Localize a naive wall-clock time, or return None when it does not exist."""
    try:
        return zone.localize(wall_clock, is_dst=None)
    except pytz.AmbiguousTimeError:
        candidates = [zone.localize(wall_clock, is_dst=flag) for flag in (True, False)]
        return min(candidates, key=lambda dt: dt.astimezone(pytz.UTC))
    except pytz.NonExistentTimeError:
        return None


def localize_wall_clock(zone: BaseTzInfo, wall_clock: datetime) -> datetime:
    """
    Attach ``zone`` to a naive wall-clock datetime using the DST edge policy.

    Args:
        zone: pytz timezone
        wall_clock: Naive local datetime (minute precision)

    Returns:
        Timezone-aware datetime in ``zone``
    """
    localized = _localize_strict(zone, wall_clock)
    if localized is not None:
        return localized

    # Spring-forward gap: walk forward to the first wall-clock minute that exists.
    cursor = wall_clock
    limit = wall_clock + MAX_GAP
    while cursor < limit:
        cursor += timedelta(minutes=1)
        localized = _localize_strict(zone, cursor)
        if localized is not None:
            return localized
    raise InvalidLocalTime(wall_clock.isoformat(), field="time", expected="an existing local time")


def resolve_local_instant(timezone_name: str, local_date: LocalDate, local_time: LocalTime) -> datetime:
    """
    Convert a local (timezone, date, time-of-day) triple into a UTC instant.

    Args:
        timezone_name: IANA zone name
        local_date: Calendar date (YYYY-MM-DD string or date)
        local_time: Wall-clock time (HH:mm string or time)

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        InvalidTimeZone: If the zone is unknown
        InvalidLocalTime: If the date or time does not parse
    """
    zone = get_zone(timezone_name)
    day = parse_local_date(local_date, field="date")
    clock = parse_local_time(local_time, field="time")
    localized = localize_wall_clock(zone, datetime.combine(day, clock))
    return localized.astimezone(pytz.UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime (naive values are assumed to be UTC)."""
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def format_utc_iso(dt: datetime) -> str:
    """Format an instant as ISO 8601 with millisecond precision and a Z suffix."""
    utc = ensure_utc(dt)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
