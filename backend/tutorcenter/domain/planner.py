"""
Batch planner.

Runs the classifier over every candidate occurrence and folds the results
into a ``GenerationPlan``. Preview and commit both call ``build_plan`` so the
counts an operator sees are produced by the exact code that drives the insert.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Sequence, Tuple

from ..core.timezone_utils import resolve_local_instant
from .classification import ClassifiedOccurrence, OccurrenceOutcome, SkipReason, classify
from .generation import GenerationRequest
from .recurrence import Occurrence
from .session_index import ExistingSessionIndex

DEFAULT_SAMPLE_LIMIT = 10


@dataclass(frozen=True)
class SkipSample:
    start_at: datetime
    reason: SkipReason


@dataclass(frozen=True)
class GenerationRange:
    start_at: datetime
    end_at: datetime


@dataclass
class GenerationPlan:
    """Aggregate classification of one generation request."""

    range: GenerationRange
    to_create: List[Occurrence] = field(default_factory=list)
    duplicate_count: int = 0
    conflict_count: int = 0
    tutor_conflict_count: int = 0
    student_conflict_count: int = 0
    duplicate_samples: List[SkipSample] = field(default_factory=list)
    conflict_samples: List[SkipSample] = field(default_factory=list)
    zoom_link_applied: bool = False

    @property
    def create_count(self) -> int:
        return len(self.to_create)

    def outcome_counts(self) -> Tuple[Tuple[OccurrenceOutcome, int], ...]:
        return (
            (OccurrenceOutcome.CREATE, self.create_count),
            (OccurrenceOutcome.DUPLICATE, self.duplicate_count),
            (OccurrenceOutcome.TUTOR_CONFLICT, self.tutor_conflict_count),
            (OccurrenceOutcome.STUDENT_CONFLICT, self.student_conflict_count),
        )


def resolve_range(request: GenerationRequest, occurrences: Sequence[Occurrence]) -> GenerationRange:
    """
    UTC span from the first occurrence's start to the last occurrence's end.

    An empty expansion falls back to the resolved (startDate, startTime) and
    (endDate, endTime) instants.
    """
    if occurrences:
        return GenerationRange(
            start_at=min(occ.start_at for occ in occurrences),
            end_at=max(occ.end_at for occ in occurrences),
        )
    return GenerationRange(
        start_at=resolve_local_instant(request.timezone, request.start_date, request.start_time),
        end_at=resolve_local_instant(request.timezone, request.end_date, request.end_time),
    )


def build_plan(
    request: GenerationRequest,
    occurrences: Sequence[Occurrence],
    index: ExistingSessionIndex,
    *,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
) -> GenerationPlan:
    """
    Classify ``occurrences`` and aggregate the outcomes.

    Samples hold the first ``sample_limit`` skipped occurrences of each kind
    in start order. Truncation never changes the counts.
    """
    plan = GenerationPlan(
        range=resolve_range(request, occurrences),
        zoom_link_applied=request.zoom_link is not None,
    )

    ordered = sorted(occurrences, key=lambda occ: (occ.start_at, occ.local_date))
    for occurrence in ordered:
        result: ClassifiedOccurrence = classify(occurrence, request, index)
        if result.outcome == OccurrenceOutcome.CREATE:
            plan.to_create.append(occurrence)
            continue

        sample = SkipSample(start_at=occurrence.start_at, reason=result.reason)
        if result.outcome == OccurrenceOutcome.DUPLICATE:
            plan.duplicate_count += 1
            if len(plan.duplicate_samples) < sample_limit:
                plan.duplicate_samples.append(sample)
            continue

        plan.conflict_count += 1
        if result.outcome == OccurrenceOutcome.TUTOR_CONFLICT:
            plan.tutor_conflict_count += 1
        else:
            plan.student_conflict_count += 1
        if len(plan.conflict_samples) < sample_limit:
            plan.conflict_samples.append(sample)

    return plan
