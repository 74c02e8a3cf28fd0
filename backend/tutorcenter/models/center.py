# backend/tutorcenter/models/center.py
"""
Center and staffing models.

A center is a physical location owned by a tenant. Tutors are tenant members
with the TUTOR role and are assigned to one or more centers.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.sql import func
import ulid

from ..database import Base


class MembershipRole(str, Enum):
    """Roles a user can hold inside a tenant."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    TUTOR = "TUTOR"
    PARENT = "PARENT"


class Center(Base):
    """A tenant's teaching location."""

    __tablename__ = "centers"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Center {self.id}: tenant={self.tenant_id}, name={self.name}>"


class TenantMembership(Base):
    """A user's role within a tenant."""

    __tablename__ = "tenant_memberships"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False)
    role = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", "role", name="uq_tenant_memberships_user_role"),
    )


class StaffCenter(Base):
    """Assignment of a staff member (tutor) to a center."""

    __tablename__ = "staff_centers"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False)
    center_id = Column(String(26), ForeignKey("centers.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", "center_id", name="uq_staff_centers_assignment"),
        Index("ix_staff_centers_tenant_center", "tenant_id", "center_id"),
    )
