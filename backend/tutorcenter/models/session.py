# backend/tutorcenter/models/session.py
"""
Tutoring session model.

A session is one concrete, scheduled meeting of a tutor with a student (ONE_ON_ONE)
or with a group/class. Start and end are absolute UTC instants; the IANA zone the
session was planned in is kept alongside for display.

The unique key (tenant_id, center_id, tutor_id, start_at) is the single source of
truth for duplicate resolution: recurring generation inserts with skip-on-conflict
against it, so concurrent commits of overlapping rules cannot double-create a slot.
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base
from .types import UTCDateTime

logger = logging.getLogger(__name__)

SESSION_UNIQUE_SLOT_CONSTRAINT = "uq_sessions_tenant_center_tutor_start"
SESSION_UNIQUE_SLOT_COLUMNS = ("tenant_id", "center_id", "tutor_id", "start_at")


class SessionType(str, Enum):
    """Who a session is scheduled for."""

    ONE_ON_ONE = "ONE_ON_ONE"
    GROUP = "GROUP"
    CLASS = "CLASS"


class TutoringSession(Base):
    """A scheduled session owned by a tenant, center and tutor."""

    __tablename__ = "sessions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))

    # Ownership (fixed at creation)
    tenant_id = Column(String(64), nullable=False)
    center_id = Column(String(26), ForeignKey("centers.id", ondelete="CASCADE"), nullable=False)
    tutor_id = Column(String(64), nullable=False)
    session_type = Column(String(20), nullable=False)
    group_id = Column(String(26), ForeignKey("groups.id", ondelete="SET NULL"), nullable=True)

    # Absolute schedule
    start_at = Column(UTCDateTime, nullable=False)
    end_at = Column(UTCDateTime, nullable=False)
    timezone = Column(String(64), nullable=False)
    zoom_link = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    students = relationship(
        "SessionStudent", back_populates="session", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint(*SESSION_UNIQUE_SLOT_COLUMNS, name=SESSION_UNIQUE_SLOT_CONSTRAINT),
        Index("ix_sessions_tenant_start", "tenant_id", "start_at"),
        Index("ix_sessions_tenant_tutor_start", "tenant_id", "tutor_id", "start_at"),
        CheckConstraint(
            "session_type IN ('ONE_ON_ONE', 'GROUP', 'CLASS')", name="ck_sessions_session_type"
        ),
        CheckConstraint("end_at > start_at", name="ck_sessions_time_order"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        logger.debug(
            f"Creating session for tutor {self.tutor_id} at center {self.center_id} "
            f"starting {self.start_at}"
        )

    def __repr__(self) -> str:
        return (
            f"<TutoringSession {self.id}: tutor={self.tutor_id}, center={self.center_id}, "
            f"type={self.session_type}, start={self.start_at}>"
        )


class SessionStudent(Base):
    """Attendance roster entry linking a student to a session."""

    __tablename__ = "session_students"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False)
    session_id = Column(String(26), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(26), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("TutoringSession", back_populates="students")

    __table_args__ = (
        UniqueConstraint("tenant_id", "session_id", "student_id", name="uq_session_students_member"),
        Index("ix_session_students_tenant_student", "tenant_id", "student_id"),
    )
