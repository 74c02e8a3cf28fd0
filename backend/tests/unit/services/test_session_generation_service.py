"""
Tests for SessionGenerationService.

Preview and commit run against the per-test SQLite database; failure paths
patch individual repository methods.
"""

from unittest.mock import patch

import pytest

from scheduling_factories import OTHER_TENANT_ID, add_session, make_request, utc
from tutorcenter.core.config import settings
from tutorcenter.core.exceptions import (
    InvalidRecurrenceRequest,
    OccurrenceLimitExceeded,
    PersistenceError,
    RepositoryException,
    ValidationException,
)
from tutorcenter.domain.classification import SkipReason
from tutorcenter.domain.session_index import ExistingSessionIndex
from tutorcenter.models import AuditEvent, AuditResult, Center, SessionStudent, TutoringSession
from tutorcenter.services.session_generation_service import SessionGenerationService


@pytest.fixture
def service(db):
    return SessionGenerationService(db)


def _session_count(db, tenant_id):
    return db.query(TutoringSession).filter(TutoringSession.tenant_id == tenant_id).count()


class TestPreview:
    def test_clean_calendar(self, service, db, world):
        plan = service.preview(world.tenant_id, make_request(world))

        assert plan.create_count == 4
        assert plan.duplicate_count == 0
        assert plan.conflict_count == 0
        assert plan.range.start_at == utc(2025, 1, 6, 15)
        assert plan.range.end_at == utc(2025, 1, 15, 16)
        assert _session_count(db, world.tenant_id) == 0

    def test_reports_duplicates_and_conflicts(self, service, db, world):
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.center.id,
            tutor_id=world.tutor_id,
            start_at=utc(2025, 1, 6, 15),
        )
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.other_center.id,
            tutor_id=world.tutor_id,
            start_at=utc(2025, 1, 8, 15),
        )
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.center.id,
            tutor_id="tutor-002",
            start_at=utc(2025, 1, 13, 15),
            student_ids=[world.student.id],
        )

        plan = service.preview(world.tenant_id, make_request(world))

        assert plan.create_count == 1
        assert plan.duplicate_count == 1
        assert plan.conflict_count == 2
        assert [s.reason for s in plan.duplicate_samples] == [SkipReason.DUPLICATE_SESSION_EXISTS]
        assert [s.start_at for s in plan.conflict_samples] == [
            utc(2025, 1, 8, 15),
            utc(2025, 1, 13, 15),
        ]

    def test_sessions_in_other_tenants_are_invisible(self, service, db, world):
        add_session(
            db,
            tenant_id=OTHER_TENANT_ID,
            center_id=world.center.id,
            tutor_id=world.tutor_id,
            start_at=utc(2025, 1, 6, 15),
        )

        plan = service.preview(world.tenant_id, make_request(world))

        assert plan.create_count == 4

    def test_index_failure_is_persistence_error(self, service, world):
        with patch.object(
            service.index_repository,
            "load_index",
            side_effect=RepositoryException("connection lost"),
        ):
            with pytest.raises(PersistenceError) as exc_info:
                service.preview(world.tenant_id, make_request(world))

        assert exc_info.value.details["operation"] == "preview"

    def test_blank_tenant(self, service, world):
        with pytest.raises(InvalidRecurrenceRequest):
            service.preview("  ", make_request(world))

    def test_configured_ceiling(self, db, world):
        config = settings.model_copy(update={"session_generation_max_occurrences": 3})
        service = SessionGenerationService(db, config=config)

        with pytest.raises(OccurrenceLimitExceeded):
            service.preview(world.tenant_id, make_request(world))

    def test_configured_sample_limit(self, db, world):
        for start_at in (utc(2025, 1, 6, 15), utc(2025, 1, 8, 15), utc(2025, 1, 13, 15)):
            add_session(
                db,
                tenant_id=world.tenant_id,
                center_id=world.center.id,
                tutor_id=world.tutor_id,
                start_at=start_at,
            )
        config = settings.model_copy(update={"session_generation_sample_limit": 2})
        service = SessionGenerationService(db, config=config)

        plan = service.preview(world.tenant_id, make_request(world))

        assert plan.duplicate_count == 3
        assert len(plan.duplicate_samples) == 2


class TestReferenceValidation:
    def test_unknown_center(self, service, world):
        with pytest.raises(ValidationException, match="Center not found for tenant"):
            service.preview(world.tenant_id, make_request(world, center_id="missing"))

    def test_center_from_other_tenant(self, service, world):
        with pytest.raises(ValidationException, match="Center not found for tenant"):
            service.preview(OTHER_TENANT_ID, make_request(world))

    def test_tutor_without_role(self, service, world):
        with pytest.raises(ValidationException, match="Tutor must have Tutor role"):
            service.preview(world.tenant_id, make_request(world, tutor_id="tutor-999"))

    def test_tutor_not_assigned(self, service, db, world):
        third = Center(tenant_id=world.tenant_id, name="Harbor")
        db.add(third)
        db.commit()

        with pytest.raises(ValidationException, match="Tutor is not assigned to this center"):
            service.preview(world.tenant_id, make_request(world, center_id=third.id))

    def test_unknown_student(self, service, world):
        with pytest.raises(ValidationException, match="Student not found for tenant"):
            service.preview(world.tenant_id, make_request(world, student_id="missing"))

    def test_group_type_must_match(self, service, world):
        request = make_request(
            world, session_type="CLASS", student_id=None, group_id=world.group.id
        )
        with pytest.raises(ValidationException, match="Group type must be CLASS"):
            service.preview(world.tenant_id, request)

    def test_group_at_other_center(self, service, world):
        request = make_request(
            world,
            center_id=world.other_center.id,
            session_type="GROUP",
            student_id=None,
            group_id=world.group.id,
        )
        with pytest.raises(ValidationException, match="Group does not belong to center"):
            service.preview(world.tenant_id, request)

    def test_unknown_group(self, service, world):
        request = make_request(world, session_type="GROUP", student_id=None, group_id="missing")
        with pytest.raises(ValidationException, match="Group not found for tenant"):
            service.preview(world.tenant_id, request)


class TestCommit:
    def test_creates_sessions_with_roster(self, service, db, world):
        result = service.commit(world.tenant_id, make_request(world))

        assert result.created_count == 4
        assert result.skipped_duplicate_count == 0
        assert result.conflict_count == 0
        assert len(result.created_ids) == 4
        assert result.created_sample_ids == result.created_ids

        sessions = (
            db.query(TutoringSession)
            .filter(TutoringSession.tenant_id == world.tenant_id)
            .order_by(TutoringSession.start_at)
            .all()
        )
        assert [s.start_at for s in sessions] == [
            utc(2025, 1, 6, 15),
            utc(2025, 1, 8, 15),
            utc(2025, 1, 13, 15),
            utc(2025, 1, 15, 15),
        ]
        assert all(s.timezone == "America/New_York" for s in sessions)
        assert all(s.session_type == "ONE_ON_ONE" for s in sessions)
        roster = db.query(SessionStudent).all()
        assert {r.student_id for r in roster} == {world.student.id}
        assert len(roster) == 4

    def test_second_commit_creates_nothing(self, service, db, world):
        request = make_request(world)
        service.commit(world.tenant_id, request)

        result = service.commit(world.tenant_id, request)

        assert result.created_count == 0
        assert result.skipped_duplicate_count == 4
        assert result.created_ids == []
        assert _session_count(db, world.tenant_id) == 4

    def test_commit_matches_preview(self, service, db, world):
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.center.id,
            tutor_id=world.tutor_id,
            start_at=utc(2025, 1, 8, 15),
        )
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.other_center.id,
            tutor_id=world.tutor_id,
            start_at=utc(2025, 1, 13, 15),
        )
        request = make_request(world)

        plan = service.preview(world.tenant_id, request)
        result = service.commit(world.tenant_id, request)

        assert result.created_count == plan.create_count == 2
        assert result.skipped_duplicate_count == plan.duplicate_count == 1
        assert result.conflict_count == plan.conflict_count == 1
        assert result.range == plan.range

    def test_zoom_link_is_stored(self, service, db, world):
        service.commit(world.tenant_id, make_request(world, zoom_link="https://zoom.us/j/77"))

        links = {s.zoom_link for s in db.query(TutoringSession).all()}
        assert links == {"https://zoom.us/j/77"}

    def test_group_roster_is_attached(self, service, db, world):
        request = make_request(
            world, session_type="GROUP", student_id=None, group_id=world.group.id
        )

        result = service.commit(world.tenant_id, request)

        assert result.created_count == 4
        roster = db.query(SessionStudent).all()
        assert len(roster) == 8
        assert {r.student_id for r in roster} == {world.student.id, world.other_student.id}
        assert {s.group_id for s in db.query(TutoringSession).all()} == {world.group.id}

    def test_empty_class_creates_sessions_without_roster(self, service, db, world):
        request = make_request(
            world, session_type="CLASS", student_id=None, group_id=world.class_group.id
        )

        result = service.commit(world.tenant_id, request)

        assert result.created_count == 4
        assert db.query(SessionStudent).count() == 0

    def test_student_conflict_is_not_created(self, service, db, world):
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.other_center.id,
            tutor_id="tutor-002",
            start_at=utc(2025, 1, 15, 15),
            student_ids=[world.student.id],
        )

        result = service.commit(world.tenant_id, make_request(world))

        assert result.created_count == 3
        assert result.conflict_count == 1

    def test_slot_taken_after_planning_counts_as_duplicate(self, service, db, world):
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.center.id,
            tutor_id=world.tutor_id,
            start_at=utc(2025, 1, 13, 15),
        )
        stale = ExistingSessionIndex(world.tenant_id, world.center.id)

        with patch.object(service.index_repository, "load_index", return_value=stale):
            result = service.commit(world.tenant_id, make_request(world))

        assert result.created_count == 3
        assert result.skipped_duplicate_count == 1
        assert result.drift_count == 1
        assert _session_count(db, world.tenant_id) == 4

    def test_insert_failure_rolls_back(self, service, db, world):
        with patch.object(
            service.session_repository,
            "insert_sessions_skip_conflicts",
            side_effect=RepositoryException("disk full"),
        ):
            with pytest.raises(PersistenceError) as exc_info:
                service.commit(world.tenant_id, make_request(world))

        assert exc_info.value.details["operation"] == "transaction"
        assert exc_info.value.message == "Database operation failed"
        assert _session_count(db, world.tenant_id) == 0

    def test_roster_failure_rolls_back_sessions(self, service, db, world):
        with patch.object(
            service.session_repository,
            "insert_session_students_skip_conflicts",
            side_effect=RepositoryException("constraint violated"),
        ):
            with pytest.raises(PersistenceError):
                service.commit(world.tenant_id, make_request(world))

        assert _session_count(db, world.tenant_id) == 0

    def test_validation_error_writes_nothing(self, service, db, world):
        with pytest.raises(ValidationException):
            service.commit(world.tenant_id, make_request(world, student_id="missing"))

        assert _session_count(db, world.tenant_id) == 0

    def test_measured_operations_are_recorded(self, service, world):
        service.commit(world.tenant_id, make_request(world))

        metrics = service.get_metrics()
        assert metrics["commit_session_generation"]["count"] >= 1


class TestCommitAudit:
    def test_success_event_carries_counts_and_input_range(self, service, db, world):
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.center.id,
            tutor_id=world.tutor_id,
            start_at=utc(2025, 1, 8, 15),
        )
        add_session(
            db,
            tenant_id=world.tenant_id,
            center_id=world.other_center.id,
            tutor_id=world.tutor_id,
            start_at=utc(2025, 1, 13, 15),
        )

        service.commit(world.tenant_id, make_request(world))

        event = db.query(AuditEvent).one()
        assert event.tenant_id == world.tenant_id
        assert event.action == "sessions.generated"
        assert event.result == AuditResult.SUCCESS.value
        assert event.entity_type == "SESSION"
        assert event.entity_id == world.center.id
        assert event.metadata_json == {
            "sessions_created_count": 2,
            "sessions_updated_count": 0,
            "sessions_skipped_count": 2,
            "input_range_from": "2025-01-06",
            "input_range_to": "2025-01-19",
        }

    def test_group_commit_is_audited_against_the_group(self, service, db, world):
        request = make_request(
            world, session_type="GROUP", student_id=None, group_id=world.group.id
        )

        service.commit(world.tenant_id, request)

        assert db.query(AuditEvent).one().entity_id == world.group.id

    def test_persistence_failure_is_audited(self, service, db, world):
        with patch.object(
            service.session_repository,
            "insert_sessions_skip_conflicts",
            side_effect=RepositoryException("disk full"),
        ):
            with pytest.raises(PersistenceError):
                service.commit(world.tenant_id, make_request(world))

        event = db.query(AuditEvent).one()
        assert event.result == AuditResult.FAILURE.value
        assert event.action == "sessions.generated"
        assert event.metadata_json == {"error_code": "PERSISTENCE_ERROR"}
        assert _session_count(db, world.tenant_id) == 0

    def test_validation_failure_is_audited(self, service, db, world):
        with pytest.raises(ValidationException) as exc_info:
            service.commit(world.tenant_id, make_request(world, student_id="missing"))

        event = db.query(AuditEvent).one()
        assert event.result == AuditResult.FAILURE.value
        assert event.metadata_json == {"error_code": exc_info.value.code}

    def test_audit_write_failure_keeps_the_sessions(self, service, db, world):
        with patch.object(
            service.audit_service.audit_repository,
            "write",
            side_effect=RepositoryException("audit table missing"),
        ):
            result = service.commit(world.tenant_id, make_request(world))

        assert result.created_count == 4
        assert _session_count(db, world.tenant_id) == 4
        assert db.query(AuditEvent).count() == 0

    def test_preview_is_not_audited(self, service, db, world):
        service.preview(world.tenant_id, make_request(world))

        assert db.query(AuditEvent).count() == 0
