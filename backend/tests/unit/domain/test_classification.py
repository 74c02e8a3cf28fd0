"""Tests for the existing-session index and occurrence classification."""

from datetime import datetime

import pytz

from scheduling_factories import make_request, utc
from tutorcenter.domain.classification import OccurrenceOutcome, SkipReason, classify
from tutorcenter.domain.recurrence import Occurrence
from tutorcenter.domain.session_index import ExistingSession, ExistingSessionIndex

TENANT = "tenant-alpha"
CENTER = "center-1"
OTHER_CENTER = "center-2"
TUTOR = "tutor-001"
OTHER_TUTOR = "tutor-002"
STUDENT = "student-1"

SLOT = utc(2025, 1, 6, 15, 0)


def _occurrence(start_at: datetime = SLOT) -> Occurrence:
    return Occurrence(local_date=start_at.date(), start_at=start_at, end_at=start_at)


def _existing(center=CENTER, tutor=TUTOR, start_at=SLOT, students=()) -> ExistingSession:
    return ExistingSession(
        session_id=f"s-{center}-{tutor}",
        center_id=center,
        tutor_id=tutor,
        start_at=start_at,
        student_ids=frozenset(students),
    )


def _index(*sessions: ExistingSession) -> ExistingSessionIndex:
    return ExistingSessionIndex(TENANT, CENTER, sessions)


class TestExistingSessionIndex:
    def test_duplicate_is_scoped_to_center(self):
        index = _index(_existing(center=OTHER_CENTER))
        assert not index.has_duplicate(TUTOR, SLOT)
        assert index.has_tutor_conflict(TUTOR, SLOT)

    def test_lookups_match_on_instant_not_representation(self):
        index = _index(_existing(students=[STUDENT]))
        eastern = pytz.timezone("America/New_York").localize(datetime(2025, 1, 6, 10, 0))
        assert index.has_duplicate(TUTOR, eastern)
        assert index.has_student_conflict(STUDENT, eastern)

    def test_only_exact_start_counts(self):
        index = _index(_existing(students=[STUDENT]))
        later = utc(2025, 1, 6, 15, 30)
        assert not index.has_duplicate(TUTOR, later)
        assert not index.has_tutor_conflict(TUTOR, later)
        assert not index.has_student_conflict(STUDENT, later)

    def test_len_and_summary(self):
        index = _index(_existing(students=[STUDENT, "student-2"]), _existing(tutor=OTHER_TUTOR))
        assert len(index) == 2
        assert index.summary() == {"sessions": 2, "tutor_slots": 2, "student_slots": 2}


class TestClassify:
    def test_create_when_nothing_exists(self):
        result = classify(_occurrence(), make_request(center_id=CENTER), _index())
        assert result.outcome == OccurrenceOutcome.CREATE
        assert result.reason is None

    def test_duplicate_wins_over_tutor_collision(self):
        result = classify(_occurrence(), make_request(center_id=CENTER), _index(_existing()))
        assert result.outcome == OccurrenceOutcome.DUPLICATE
        assert result.reason == SkipReason.DUPLICATE_SESSION_EXISTS

    def test_tutor_busy_at_other_center(self):
        result = classify(
            _occurrence(), make_request(center_id=CENTER), _index(_existing(center=OTHER_CENTER))
        )
        assert result.outcome == OccurrenceOutcome.TUTOR_CONFLICT
        assert result.reason == SkipReason.TUTOR_START_COLLISION

    def test_tutor_collision_wins_over_student_collision(self):
        index = _index(
            _existing(center=OTHER_CENTER),
            _existing(tutor=OTHER_TUTOR, students=[STUDENT]),
        )
        result = classify(_occurrence(), make_request(center_id=CENTER, student_id=STUDENT), index)
        assert result.outcome == OccurrenceOutcome.TUTOR_CONFLICT

    def test_student_busy_with_another_tutor(self):
        index = _index(_existing(tutor=OTHER_TUTOR, students=[STUDENT]))
        result = classify(_occurrence(), make_request(center_id=CENTER, student_id=STUDENT), index)
        assert result.outcome == OccurrenceOutcome.STUDENT_CONFLICT
        assert result.reason == SkipReason.STUDENT_START_COLLISION

    def test_group_requests_skip_student_checks(self):
        index = _index(_existing(tutor=OTHER_TUTOR, students=[STUDENT]))
        request = make_request(
            center_id=CENTER, session_type="GROUP", student_id=None, group_id="group-1"
        )
        result = classify(_occurrence(), request, index)
        assert result.outcome == OccurrenceOutcome.CREATE

    def test_other_tutor_at_same_center_is_not_a_duplicate(self):
        index = _index(_existing(tutor=OTHER_TUTOR))
        result = classify(_occurrence(), make_request(center_id=CENTER), index)
        assert result.outcome == OccurrenceOutcome.CREATE
