# backend/tutorcenter/repositories/session_index_repository.py
"""
Session Index Repository for the tutoring-center backend

Loads the existing-session snapshot a generation request is classified
against. Only sessions that start at one of the request's candidate instants
are read, and only those that could matter: the requested tutor's sessions
anywhere in the tenant, plus (for one-on-one requests) any session the
requested student is attending.
"""

from collections import defaultdict
from datetime import datetime
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, cast

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..domain.session_index import ExistingSession, ExistingSessionIndex
from ..models.session import SessionStudent, TutoringSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# Keeps the IN (...) list well under driver parameter limits.
START_CHUNK_SIZE = 500


def _chunked(values: Sequence[datetime], size: int) -> Iterable[Sequence[datetime]]:
    for offset in range(0, len(values), size):
        yield values[offset : offset + size]


class SessionIndexRepository(BaseRepository[TutoringSession]):
    """Read-only queries backing the existing-session index."""

    def __init__(self, db: Session):
        super().__init__(db, TutoringSession)
        self.logger = logging.getLogger(__name__)

    def find_sessions_at_starts(
        self,
        tenant_id: str,
        tutor_id: str,
        start_instants: Sequence[datetime],
        student_id: Optional[str] = None,
    ) -> List[ExistingSession]:
        """
        Sessions in the tenant starting at any of ``start_instants`` that
        involve the tutor or, when given, the student.

        Args:
            tenant_id: Tenant scope
            tutor_id: Tutor whose sessions are always included
            start_instants: Candidate UTC start instants
            student_id: Optional student whose attended sessions are included

        Returns:
            Snapshot records with each session's attending student ids
        """
        unique_starts = sorted(set(start_instants))
        if not unique_starts:
            return []

        try:
            rows: List[TutoringSession] = []
            for chunk in _chunked(unique_starts, START_CHUNK_SIZE):
                involvement = [TutoringSession.tutor_id == tutor_id]
                if student_id:
                    attended = select(SessionStudent.session_id).where(
                        SessionStudent.tenant_id == tenant_id,
                        SessionStudent.student_id == student_id,
                    )
                    involvement.append(TutoringSession.id.in_(attended))
                rows.extend(
                    cast(
                        List[TutoringSession],
                        self.db.query(TutoringSession)
                        .filter(
                            TutoringSession.tenant_id == tenant_id,
                            TutoringSession.start_at.in_(list(chunk)),
                            or_(*involvement),
                        )
                        .all(),
                    )
                )

            students_by_session = self._students_by_session(tenant_id, [row.id for row in rows])
        except Exception as e:
            self.logger.error(f"Error loading existing sessions for index: {str(e)}")
            raise RepositoryException(f"Failed to load existing sessions: {str(e)}")

        return [
            ExistingSession(
                session_id=row.id,
                center_id=row.center_id,
                tutor_id=row.tutor_id,
                start_at=row.start_at,
                student_ids=frozenset(students_by_session.get(row.id, ())),
            )
            for row in rows
        ]

    def _students_by_session(self, tenant_id: str, session_ids: List[str]) -> Dict[str, Set[str]]:
        roster: Dict[str, Set[str]] = defaultdict(set)
        for offset in range(0, len(session_ids), START_CHUNK_SIZE):
            chunk = session_ids[offset : offset + START_CHUNK_SIZE]
            pairs = (
                self.db.query(SessionStudent.session_id, SessionStudent.student_id)
                .filter(
                    SessionStudent.tenant_id == tenant_id,
                    SessionStudent.session_id.in_(chunk),
                )
                .all()
            )
            for session_id, student_id in pairs:
                roster[session_id].add(student_id)
        return roster

    def load_index(
        self,
        tenant_id: str,
        center_id: str,
        tutor_id: str,
        start_instants: Sequence[datetime],
        student_id: Optional[str] = None,
    ) -> ExistingSessionIndex:
        """Build a fresh ``ExistingSessionIndex`` for one request."""
        sessions = self.find_sessions_at_starts(tenant_id, tutor_id, start_instants, student_id)
        index = ExistingSessionIndex(tenant_id, center_id, sessions)
        self.logger.debug(
            "Loaded session index for tenant %s center %s: %s",
            tenant_id,
            center_id,
            index.summary(),
        )
        return index
