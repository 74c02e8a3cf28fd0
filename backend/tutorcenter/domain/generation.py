"""
Recurring generation request.

``GenerationRequest`` is the transient, validated form of one preview/commit call.
It is built once per request by ``build_generation_request`` and then shared by the
enumerator, the classifier and the commit executor, so every phase sees the same
normalized values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import FrozenSet, Iterable, Optional

from ..core.constants import ISO_WEEKDAYS
from ..core.exceptions import EmptyWeekdaySelection, InvalidRecurrenceRequest, ValidationException
from ..core.timezone_utils import get_zone, parse_local_date, parse_local_time
from ..models.session import SessionType
from ..utils.time_utils import time_to_minutes
from ..utils.url_validation import normalize_meeting_link


@dataclass(frozen=True)
class GenerationRequest:
    """A validated recurrence rule plus the ownership of the sessions it produces."""

    center_id: str
    tutor_id: str
    session_type: SessionType
    start_date: date
    end_date: date
    weekdays: FrozenSet[int]
    start_time: time
    end_time: time
    timezone: str
    student_id: Optional[str] = None
    group_id: Optional[str] = None
    zoom_link: Optional[str] = None

    @property
    def is_one_on_one(self) -> bool:
        return self.session_type == SessionType.ONE_ON_ONE


def _require_text(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidRecurrenceRequest(f"{field} is required", field=field)
    return cleaned


def _optional_text(value: Optional[str]) -> Optional[str]:
    cleaned = (value or "").strip()
    return cleaned or None


def _normalize_weekdays(weekdays: Iterable[int]) -> FrozenSet[int]:
    selected = frozenset(int(day) for day in weekdays)
    if not selected:
        raise EmptyWeekdaySelection()
    invalid = sorted(day for day in selected if day not in ISO_WEEKDAYS)
    if invalid:
        raise InvalidRecurrenceRequest(
            f"weekdays must be ISO weekday numbers 1-7, got {invalid}", field="weekdays"
        )
    return selected


def build_generation_request(
    *,
    center_id: Optional[str],
    tutor_id: Optional[str],
    session_type: str | SessionType,
    start_date: str | date,
    end_date: str | date,
    weekdays: Iterable[int],
    start_time: str | time,
    end_time: str | time,
    timezone: str,
    student_id: Optional[str] = None,
    group_id: Optional[str] = None,
    zoom_link: Optional[str] = None,
) -> GenerationRequest:
    """
    Validate raw recurrence parameters and return a ``GenerationRequest``.

    Raises:
        InvalidRecurrenceRequest: Missing ids, student/group mismatch, bad time order
        EmptyWeekdaySelection: No weekday selected
        InvalidTimeZone: Unknown IANA zone
        InvalidLocalTime: Unparseable date or time
        ValidationException: Invalid zoom link
    """
    center = _require_text(center_id, "centerId")
    tutor = _require_text(tutor_id, "tutorId")

    try:
        kind = SessionType(session_type)
    except ValueError:
        raise InvalidRecurrenceRequest(
            f"sessionType must be one of {[t.value for t in SessionType]}", field="sessionType"
        )

    student = _optional_text(student_id)
    group = _optional_text(group_id)
    if kind == SessionType.ONE_ON_ONE:
        if not student:
            raise InvalidRecurrenceRequest("studentId is required", field="studentId")
        if group:
            raise InvalidRecurrenceRequest("groupId is not allowed", field="groupId")
    else:
        if not group:
            raise InvalidRecurrenceRequest("groupId is required", field="groupId")
        if student:
            raise InvalidRecurrenceRequest("studentId is not allowed", field="studentId")

    first_day = parse_local_date(start_date, field="startDate")
    last_day = parse_local_date(end_date, field="endDate")
    selected = _normalize_weekdays(weekdays)

    start_clock = parse_local_time(start_time, field="startTime")
    end_clock = parse_local_time(end_time, field="endTime")
    if time_to_minutes(end_clock) <= time_to_minutes(start_clock):
        raise InvalidRecurrenceRequest("endTime must be after startTime", field="endTime")

    zone_name = (timezone or "").strip()
    get_zone(zone_name)

    try:
        link = normalize_meeting_link(zoom_link)
    except ValueError:
        raise ValidationException("Invalid zoom link", code="INVALID_ZOOM_LINK", field="zoomLink")

    return GenerationRequest(
        center_id=center,
        tutor_id=tutor,
        session_type=kind,
        start_date=first_day,
        end_date=last_day,
        weekdays=selected,
        start_time=start_clock,
        end_time=end_clock,
        timezone=zone_name,
        student_id=student,
        group_id=group,
        zoom_link=link,
    )
