# backend/tutorcenter/models/student.py
"""
Student and group roster models.
"""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class GroupType(str, Enum):
    """Kinds of student groups; each maps to the session type scheduled for it."""

    GROUP = "GROUP"
    CLASS = "CLASS"


class Student(Base):
    """A student enrolled with a tenant."""

    __tablename__ = "students"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Student {self.id}: tenant={self.tenant_id}>"


class Group(Base):
    """A group or class of students taught together at one center."""

    __tablename__ = "groups"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    center_id = Column(String(26), ForeignKey("centers.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default=GroupType.GROUP.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("GroupStudent", back_populates="group", cascade="all, delete-orphan")

    __table_args__ = (CheckConstraint("type IN ('GROUP', 'CLASS')", name="ck_groups_type"),)


class GroupStudent(Base):
    """Roster entry linking a student to a group."""

    __tablename__ = "group_students"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False)
    group_id = Column(String(26), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(26), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", back_populates="members")

    __table_args__ = (
        UniqueConstraint("tenant_id", "group_id", "student_id", name="uq_group_students_member"),
    )
