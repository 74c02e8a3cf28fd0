# backend/tutorcenter/services/session_generation_service.py
"""
Recurring session generation service.

Turns a recurrence rule into concrete sessions in two phases:

- ``preview`` expands the rule, classifies every occurrence against the
  existing sessions and returns the aggregate plan without writing anything;
- ``commit`` repeats the same planning inside one transaction and inserts
  the creatable occurrences with skip-on-conflict semantics.

Both phases call ``_plan_request``, and the existing-session index is loaded
fresh each time, so a commit never acts on a stale preview.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    InvalidRecurrenceRequest,
    PersistenceError,
    RepositoryException,
    ValidationException,
)
from ..domain.generation import GenerationRequest
from ..domain.planner import GenerationPlan, build_plan
from ..domain.recurrence import enumerate_occurrences
from ..models.session import SessionType
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.scheduling_reference_repository import SchedulingReferenceRepository
from ..repositories.session_index_repository import SessionIndexRepository
from ..repositories.session_repository import SessionRepository
from .audit_service import AuditService
from .base import BaseService
from .session_commit_executor import CommitResult, SessionCommitExecutor

logger = logging.getLogger(__name__)


class SessionGenerationService(BaseService):
    """Preview and commit of recurring tutoring sessions."""

    def __init__(
        self,
        db: Session,
        index_repository: Optional[SessionIndexRepository] = None,
        session_repository: Optional[SessionRepository] = None,
        reference_repository: Optional[SchedulingReferenceRepository] = None,
        config: Optional[Settings] = None,
        audit_service: Optional[AuditService] = None,
    ):
        super().__init__(db)
        self.config = config or default_settings
        self.index_repository = (
            index_repository or RepositoryFactory.create_session_index_repository(db)
        )
        self.session_repository = session_repository or RepositoryFactory.create_session_repository(
            db
        )
        self.reference_repository = (
            reference_repository or RepositoryFactory.create_scheduling_reference_repository(db)
        )
        self.commit_executor = SessionCommitExecutor(
            self.session_repository, batch_size=self.config.session_generation_insert_batch_size
        )
        self.audit_service = audit_service or AuditService(db)

    def _validate_references(self, tenant_id: str, request: GenerationRequest) -> List[str]:
        """
        Check that every id in the request resolves inside the tenant.

        Returns:
            Student ids to attach to each created session
        """
        refs = self.reference_repository
        if refs.get_center(tenant_id, request.center_id) is None:
            raise ValidationException("Center not found for tenant", field="centerId")
        if not refs.has_tutor_role(tenant_id, request.tutor_id):
            raise ValidationException("Tutor must have Tutor role in this tenant", field="tutorId")
        if not refs.is_assigned_to_center(tenant_id, request.tutor_id, request.center_id):
            raise ValidationException("Tutor is not assigned to this center", field="tutorId")

        if request.session_type == SessionType.ONE_ON_ONE:
            if refs.get_student(tenant_id, request.student_id) is None:
                raise ValidationException("Student not found for tenant", field="studentId")
            return [request.student_id]

        group = refs.get_group(tenant_id, request.group_id)
        if group is None:
            raise ValidationException("Group not found for tenant", field="groupId")
        if group.center_id != request.center_id:
            raise ValidationException("Group does not belong to center", field="groupId")
        if group.type != request.session_type.value:
            raise ValidationException(
                f"Group type must be {request.session_type.value}", field="groupId"
            )
        return refs.get_group_roster_ids(tenant_id, request.group_id)

    def _plan_request(
        self, tenant_id: str, request: GenerationRequest, operation: str
    ) -> Tuple[GenerationPlan, List[str]]:
        """Enumerate, validate references, load a fresh index and classify."""
        if not (tenant_id or "").strip():
            raise InvalidRecurrenceRequest("Tenant is required", field="tenantId")

        occurrences = enumerate_occurrences(
            request,
            max_occurrences=self.config.session_generation_max_occurrences,
            max_range_days=self.config.session_generation_max_range_days,
        )

        try:
            student_ids = self._validate_references(tenant_id, request)
            index = self.index_repository.load_index(
                tenant_id,
                request.center_id,
                request.tutor_id,
                [occ.start_at for occ in occurrences],
                student_id=request.student_id if request.is_one_on_one else None,
            )
        except RepositoryException as e:
            self.logger.error(f"Failed to load scheduling data for {operation}: {str(e)}")
            raise PersistenceError("Failed to read existing sessions", operation=operation) from e

        plan = build_plan(
            request,
            occurrences,
            index,
            sample_limit=self.config.session_generation_sample_limit,
        )
        return plan, student_ids

    def _record_outcomes(self, phase: str, plan: GenerationPlan) -> None:
        for outcome, count in plan.outcome_counts():
            prometheus_metrics.record_generation_outcome(phase, outcome.value, count)

    @BaseService.measure_operation("preview_session_generation")
    def preview(self, tenant_id: str, request: GenerationRequest) -> GenerationPlan:
        """
        Classify a recurrence rule without persisting anything.

        Args:
            tenant_id: Caller's tenant
            request: Validated generation request

        Returns:
            The plan: counts, bounded samples, range and zoom link flag
        """
        plan, _ = self._plan_request(tenant_id, request, operation="preview")
        self._record_outcomes("preview", plan)
        self.logger.info(
            f"Previewed session generation for tutor {request.tutor_id} at center "
            f"{request.center_id}: create={plan.create_count} duplicate={plan.duplicate_count} "
            f"conflict={plan.conflict_count}"
        )
        return plan

    @BaseService.measure_operation("commit_session_generation")
    def commit(self, tenant_id: str, request: GenerationRequest) -> CommitResult:
        """
        Persist the creatable occurrences of a recurrence rule.

        Planning and insertion share one transaction; any database failure
        rolls the whole batch back and raises PersistenceError. A
        ``sessions.generated`` audit event records the outcome either way.

        Args:
            tenant_id: Caller's tenant
            request: Validated generation request

        Returns:
            Counts reconciled against the rows actually inserted
        """
        try:
            with self.transaction():
                plan, student_ids = self._plan_request(tenant_id, request, operation="commit")
                result = self.commit_executor.execute(tenant_id, request, plan, student_ids)
        except Exception as e:
            self.audit_service.record_sessions_generation_failed(tenant_id, request, e)
            raise
        self.audit_service.record_sessions_generated(tenant_id, request, result)

        self._record_outcomes("commit", plan)
        prometheus_metrics.record_commit_drift(result.drift_count)
        self.logger.info(
            f"Committed session generation for tutor {request.tutor_id} at center "
            f"{request.center_id}: created={result.created_count} "
            f"skipped_duplicate={result.skipped_duplicate_count} conflict={result.conflict_count}"
        )
        return result

