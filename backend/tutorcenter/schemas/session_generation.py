# backend/tutorcenter/schemas/session_generation.py
"""
Request and response schemas for recurring session generation.

Wire names are camelCase. Field shapes are checked here; recurrence semantics
(formats, weekday range, student/group pairing, timezone, zoom link) are
checked once by ``build_generation_request`` when the DTO is converted.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from ..core.timezone_utils import format_utc_iso
from ..domain.generation import GenerationRequest, build_generation_request
from ..domain.planner import GenerationPlan, GenerationRange, SkipSample
from ..services.session_commit_executor import CommitResult
from ._strict_base import StrictModel, StrictRequestModel


class SessionGenerationRequest(StrictRequestModel):
    """Recurrence rule submitted to both preview and commit."""

    center_id: str = Field(..., min_length=1, description="Center the sessions belong to")
    tutor_id: str = Field(..., min_length=1, description="Tutor user id")
    session_type: Literal["ONE_ON_ONE", "GROUP", "CLASS"]
    student_id: Optional[str] = Field(None, description="Required for ONE_ON_ONE")
    group_id: Optional[str] = Field(None, description="Required for GROUP and CLASS")
    start_date: str = Field(..., description="First local date (YYYY-MM-DD)", examples=["2025-01-06"])
    end_date: str = Field(..., description="Last local date, inclusive", examples=["2025-01-19"])
    weekdays: List[int] = Field(..., description="ISO weekdays, Monday=1 ... Sunday=7")
    start_time: str = Field(..., description="Local start time (HH:mm)", examples=["10:00"])
    end_time: str = Field(..., description="Local end time (HH:mm)", examples=["11:00"])
    timezone: str = Field(..., min_length=1, examples=["America/New_York"])
    zoom_link: Optional[str] = None

    def to_domain(self) -> GenerationRequest:
        return build_generation_request(
            center_id=self.center_id,
            tutor_id=self.tutor_id,
            session_type=self.session_type,
            student_id=self.student_id,
            group_id=self.group_id,
            start_date=self.start_date,
            end_date=self.end_date,
            weekdays=self.weekdays,
            start_time=self.start_time,
            end_time=self.end_time,
            timezone=self.timezone,
            zoom_link=self.zoom_link,
        )


class GenerationRangeResponse(StrictModel):
    from_: str = Field(..., alias="from")
    to: str

    @classmethod
    def from_range(cls, generated: GenerationRange) -> "GenerationRangeResponse":
        return cls(
            from_=format_utc_iso(generated.start_at),
            to=format_utc_iso(generated.end_at),
        )


class SkipSampleResponse(StrictModel):
    date: str
    reason: str

    @classmethod
    def from_sample(cls, sample: SkipSample) -> "SkipSampleResponse":
        return cls(date=format_utc_iso(sample.start_at), reason=sample.reason.value)


class SkipSummaryResponse(StrictModel):
    count: int
    sample: List[SkipSampleResponse]


class SessionGenerationPreviewResponse(StrictModel):
    """What a commit of the same request would do right now."""

    range: GenerationRangeResponse
    would_create_count: int
    would_skip_duplicate_count: int
    would_conflict_count: int
    duplicates_summary: SkipSummaryResponse
    conflicts_summary: SkipSummaryResponse
    zoom_link_applied: bool

    @classmethod
    def from_plan(cls, plan: GenerationPlan) -> "SessionGenerationPreviewResponse":
        return cls(
            range=GenerationRangeResponse.from_range(plan.range),
            would_create_count=plan.create_count,
            would_skip_duplicate_count=plan.duplicate_count,
            would_conflict_count=plan.conflict_count,
            duplicates_summary=SkipSummaryResponse(
                count=plan.duplicate_count,
                sample=[SkipSampleResponse.from_sample(s) for s in plan.duplicate_samples],
            ),
            conflicts_summary=SkipSummaryResponse(
                count=plan.conflict_count,
                sample=[SkipSampleResponse.from_sample(s) for s in plan.conflict_samples],
            ),
            zoom_link_applied=plan.zoom_link_applied,
        )


class SessionGenerationCommitResponse(StrictModel):
    """Counts reconciled against what was actually persisted."""

    created_count: int
    skipped_duplicate_count: int
    conflict_count: int
    range: GenerationRangeResponse
    created_sample_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: CommitResult) -> "SessionGenerationCommitResponse":
        return cls(
            created_count=result.created_count,
            skipped_duplicate_count=result.skipped_duplicate_count,
            conflict_count=result.conflict_count,
            range=GenerationRangeResponse.from_range(result.range),
            created_sample_ids=result.created_sample_ids,
        )
