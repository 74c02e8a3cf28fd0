# backend/tutorcenter/services/session_commit_executor.py
"""
Commit executor for recurring session generation.

Persists the CREATE bucket of a ``GenerationPlan`` and reconciles the reported
counts with what actually landed. It runs inside the caller's transaction and
never commits on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Sequence

import ulid

from ..core.constants import CREATED_SAMPLE_ID_LIMIT
from ..domain.generation import GenerationRequest
from ..domain.planner import GenerationPlan, GenerationRange
from ..repositories.session_repository import InsertedSession, SessionRepository

logger = logging.getLogger(__name__)


@dataclass
class CommitResult:
    created_count: int
    skipped_duplicate_count: int
    conflict_count: int
    range: GenerationRange
    created_ids: List[str] = field(default_factory=list)
    drift_count: int = 0

    @property
    def created_sample_ids(self) -> List[str]:
        return self.created_ids[:CREATED_SAMPLE_ID_LIMIT]


class SessionCommitExecutor:
    """Inserts planned sessions with skip-on-conflict and attaches their students."""

    def __init__(self, session_repository: SessionRepository, batch_size: int):
        self.session_repository = session_repository
        self.batch_size = batch_size

    def _session_rows(
        self, tenant_id: str, request: GenerationRequest, plan: GenerationPlan
    ) -> List[Dict[str, Any]]:
        return [
            {
                "id": str(ulid.ULID()),
                "tenant_id": tenant_id,
                "center_id": request.center_id,
                "tutor_id": request.tutor_id,
                "session_type": request.session_type.value,
                "group_id": request.group_id,
                "start_at": occurrence.start_at,
                "end_at": occurrence.end_at,
                "timezone": request.timezone,
                "zoom_link": request.zoom_link,
            }
            for occurrence in plan.to_create
        ]

    def _roster_rows(
        self, tenant_id: str, inserted: Sequence[InsertedSession], student_ids: Sequence[str]
    ) -> List[Dict[str, Any]]:
        return [
            {
                "id": str(ulid.ULID()),
                "tenant_id": tenant_id,
                "session_id": session.id,
                "student_id": student_id,
            }
            for session in inserted
            for student_id in student_ids
        ]

    def execute(
        self,
        tenant_id: str,
        request: GenerationRequest,
        plan: GenerationPlan,
        student_ids: Sequence[str],
    ) -> CommitResult:
        """
        Insert the plan's creatable occurrences.

        Args:
            tenant_id: Owning tenant
            request: The validated request the plan was built from
            plan: Freshly built plan for this commit
            student_ids: Students attached to every inserted session

        Returns:
            Counts reconciled against the rows actually inserted
        """
        rows = self._session_rows(tenant_id, request, plan)
        inserted = self.session_repository.insert_sessions_skip_conflicts(
            rows, batch_size=self.batch_size
        )
        inserted = sorted(inserted, key=lambda session: session.start_at)

        roster = self._roster_rows(tenant_id, inserted, student_ids)
        self.session_repository.insert_session_students_skip_conflicts(
            roster, batch_size=self.batch_size
        )

        created_count = len(inserted)
        drift = plan.create_count - created_count
        if drift:
            logger.warning(
                f"{drift} planned session(s) for tutor {request.tutor_id} were created "
                f"concurrently and skipped at insert time"
            )

        return CommitResult(
            created_count=created_count,
            skipped_duplicate_count=plan.duplicate_count + drift,
            conflict_count=plan.conflict_count,
            range=plan.range,
            created_ids=[session.id for session in inserted],
            drift_count=drift,
        )
