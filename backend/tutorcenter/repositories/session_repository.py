# backend/tutorcenter/repositories/session_repository.py
"""
Session Repository for the tutoring-center backend

Write path for generated sessions. Inserts are skip-on-conflict against the
slot key (tenant_id, center_id, tutor_id, start_at): a row whose slot was
taken by a concurrent writer is silently dropped, and only the rows that
really landed are reported back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy import insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.session import SESSION_UNIQUE_SLOT_COLUMNS, SessionStudent, TutoringSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

SESSION_STUDENT_UNIQUE_COLUMNS = ("tenant_id", "session_id", "student_id")

DEFAULT_BATCH_SIZE = 500


@dataclass(frozen=True)
class InsertedSession:
    id: str
    start_at: datetime


def _batches(rows: Sequence[Dict[str, Any]], size: int) -> List[Sequence[Dict[str, Any]]]:
    return [rows[offset : offset + size] for offset in range(0, len(rows), size)]


class SessionRepository(BaseRepository[TutoringSession]):
    """Repository for inserting generated sessions and their rosters."""

    def __init__(self, db: Session):
        super().__init__(db, TutoringSession)
        self.logger = logging.getLogger(__name__)

    def _supports_upsert_returning(self) -> bool:
        if self.dialect_name == "postgresql":
            return True
        if self.dialect_name == "sqlite":
            bind = self.db.get_bind()
            # RETURNING needs SQLite 3.35+
            return bool(getattr(bind.dialect, "insert_returning", False))
        return False

    def insert_sessions_skip_conflicts(
        self, rows: Sequence[Dict[str, Any]], batch_size: int = DEFAULT_BATCH_SIZE
    ) -> List[InsertedSession]:
        """
        Insert session rows, skipping any whose slot key already exists.

        Args:
            rows: Column dicts; each must carry its own ``id``
            batch_size: Rows per INSERT statement

        Returns:
            The sessions actually inserted, in insertion order

        Raises:
            RepositoryException: On any database error other than a slot collision
        """
        if not rows:
            return []

        try:
            if self._supports_upsert_returning():
                return self._insert_sessions_upsert(rows, batch_size)
            return self._insert_sessions_with_savepoints(rows)
        except SQLAlchemyError as e:
            self.logger.error(f"Error inserting generated sessions: {str(e)}")
            raise RepositoryException(f"Failed to insert sessions: {str(e)}")

    def _insert_sessions_upsert(
        self, rows: Sequence[Dict[str, Any]], batch_size: int
    ) -> List[InsertedSession]:
        insert_fn = pg_insert if self.dialect_name == "postgresql" else sqlite_insert
        inserted: List[InsertedSession] = []
        for batch in _batches(rows, batch_size):
            stmt = (
                insert_fn(TutoringSession)
                .values(list(batch))
                .on_conflict_do_nothing(index_elements=list(SESSION_UNIQUE_SLOT_COLUMNS))
                .returning(TutoringSession.id, TutoringSession.start_at)
            )
            result = self.db.execute(stmt)
            inserted.extend(InsertedSession(id=row[0], start_at=row[1]) for row in result.all())
        return inserted

    def _insert_sessions_with_savepoints(
        self, rows: Sequence[Dict[str, Any]]
    ) -> List[InsertedSession]:
        inserted: List[InsertedSession] = []
        for row in rows:
            try:
                with self.db.begin_nested():
                    self.db.execute(insert(TutoringSession).values(**row))
            except IntegrityError:
                self.logger.debug(
                    "Slot already taken for tutor %s at %s", row.get("tutor_id"), row.get("start_at")
                )
                continue
            inserted.append(InsertedSession(id=row["id"], start_at=row["start_at"]))
        return inserted

    def insert_session_students_skip_conflicts(
        self, rows: Sequence[Dict[str, Any]], batch_size: int = DEFAULT_BATCH_SIZE
    ) -> int:
        """
        Attach students to sessions, ignoring pairs that already exist.

        Returns:
            Number of rows submitted
        """
        if not rows:
            return 0

        try:
            dialect = self.dialect_name
            if dialect in ("postgresql", "sqlite"):
                insert_fn = pg_insert if dialect == "postgresql" else sqlite_insert
                for batch in _batches(rows, batch_size):
                    stmt = (
                        insert_fn(SessionStudent)
                        .values(list(batch))
                        .on_conflict_do_nothing(index_elements=list(SESSION_STUDENT_UNIQUE_COLUMNS))
                    )
                    self.db.execute(stmt)
                return len(rows)

            for row in rows:
                try:
                    with self.db.begin_nested():
                        self.db.execute(insert(SessionStudent).values(**row))
                except IntegrityError:
                    continue
            return len(rows)
        except SQLAlchemyError as e:
            self.logger.error(f"Error inserting session roster: {str(e)}")
            raise RepositoryException(f"Failed to insert session students: {str(e)}")
