"""
Occurrence classification.

Each candidate occurrence gets exactly one outcome. The order of the checks
is fixed: duplicate, then tutor collision, then student collision, then
create. An occurrence that is both a duplicate and a tutor collision is
therefore always reported as a duplicate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .generation import GenerationRequest
from .recurrence import Occurrence
from .session_index import ExistingSessionIndex


class OccurrenceOutcome(str, Enum):
    CREATE = "CREATE"
    DUPLICATE = "DUPLICATE"
    TUTOR_CONFLICT = "TUTOR_CONFLICT"
    STUDENT_CONFLICT = "STUDENT_CONFLICT"


class SkipReason(str, Enum):
    DUPLICATE_SESSION_EXISTS = "DUPLICATE_SESSION_EXISTS"
    TUTOR_START_COLLISION = "TUTOR_START_COLLISION"
    STUDENT_START_COLLISION = "STUDENT_START_COLLISION"


@dataclass(frozen=True)
class ClassifiedOccurrence:
    occurrence: Occurrence
    outcome: OccurrenceOutcome
    reason: Optional[SkipReason] = None


def classify(
    occurrence: Occurrence,
    request: GenerationRequest,
    index: ExistingSessionIndex,
) -> ClassifiedOccurrence:
    """Assign one outcome to ``occurrence`` against the existing-session snapshot."""
    start_at = occurrence.start_at

    if index.has_duplicate(request.tutor_id, start_at):
        return ClassifiedOccurrence(
            occurrence, OccurrenceOutcome.DUPLICATE, SkipReason.DUPLICATE_SESSION_EXISTS
        )

    if index.has_tutor_conflict(request.tutor_id, start_at):
        return ClassifiedOccurrence(
            occurrence, OccurrenceOutcome.TUTOR_CONFLICT, SkipReason.TUTOR_START_COLLISION
        )

    # Group and class rosters are not checked for student collisions.
    if request.is_one_on_one and request.student_id:
        if index.has_student_conflict(request.student_id, start_at):
            return ClassifiedOccurrence(
                occurrence, OccurrenceOutcome.STUDENT_CONFLICT, SkipReason.STUDENT_START_COLLISION
            )

    return ClassifiedOccurrence(occurrence, OccurrenceOutcome.CREATE)
