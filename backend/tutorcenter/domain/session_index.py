"""
Existing-session index.

A read-only snapshot of sessions already stored at the candidate start
instants of one generation request. The snapshot is loaded fresh for every
preview and every commit, and the classifier only asks it three questions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, Set, Tuple

from ..core.timezone_utils import ensure_utc


@dataclass(frozen=True)
class ExistingSession:
    """The slice of a stored session the classifier needs."""

    session_id: str
    center_id: str
    tutor_id: str
    start_at: datetime
    student_ids: FrozenSet[str] = field(default_factory=frozenset)


class ExistingSessionIndex:
    """
    Lookups over the existing sessions of one tenant.

    Duplicate checks are scoped to the request's center. Tutor and student
    collisions are tenant-wide, since a person cannot attend two centers at
    the same instant.
    """

    def __init__(self, tenant_id: str, center_id: str, sessions: Iterable[ExistingSession] = ()):
        self.tenant_id = tenant_id
        self.center_id = center_id
        self._slot_keys: Set[Tuple[str, str, datetime]] = set()
        self._tutor_starts: Set[Tuple[str, datetime]] = set()
        self._student_starts: Set[Tuple[str, datetime]] = set()
        self._count = 0
        for session in sessions:
            self._add(session)

    def _add(self, session: ExistingSession) -> None:
        start_at = ensure_utc(session.start_at)
        self._slot_keys.add((session.center_id, session.tutor_id, start_at))
        self._tutor_starts.add((session.tutor_id, start_at))
        for student_id in session.student_ids:
            self._student_starts.add((student_id, start_at))
        self._count += 1

    def __len__(self) -> int:
        return self._count

    def has_duplicate(self, tutor_id: str, start_at: datetime) -> bool:
        """True when this center already has this tutor's session at ``start_at``."""
        return (self.center_id, tutor_id, ensure_utc(start_at)) in self._slot_keys

    def has_tutor_conflict(self, tutor_id: str, start_at: datetime) -> bool:
        """True when any session in the tenant occupies the tutor at ``start_at``."""
        return (tutor_id, ensure_utc(start_at)) in self._tutor_starts

    def has_student_conflict(self, student_id: str, start_at: datetime) -> bool:
        """True when any session in the tenant lists the student at ``start_at``."""
        return (student_id, ensure_utc(start_at)) in self._student_starts

    def summary(self) -> Dict[str, int]:
        return {
            "sessions": self._count,
            "tutor_slots": len(self._tutor_starts),
            "student_slots": len(self._student_starts),
        }
