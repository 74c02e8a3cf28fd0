# backend/tutorcenter/models/audit_event.py
"""
Audit trail model.

One row per audited action inside a tenant, written after the action
finished, successfully or not. ``metadata`` holds a small sanitized JSON
payload (counts, input ranges, error codes), never request bodies.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import pytz
import ulid

from ..database import Base
from .types import UTCDateTime


def _now_utc() -> datetime:
    return datetime.now(pytz.UTC)


class AuditResult(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class AuditEvent(Base):
    """Persistence model for audit trail entries."""

    __tablename__ = "audit_events"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tenant_id = Column(String(64), nullable=False)
    action = Column(String(64), nullable=False)
    entity_type = Column(String(30), nullable=True)
    entity_id = Column(String(64), nullable=True)
    result = Column(String(10), nullable=False)
    metadata_json = Column(
        "metadata",
        JSONB(astext_type=Text()).with_variant(JSON(), "sqlite"),
        nullable=True,
    )
    occurred_at = Column(
        UTCDateTime, nullable=False, default=_now_utc, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_audit_events_tenant_occurred", "tenant_id", "occurred_at"),
        Index("ix_audit_events_tenant_action", "tenant_id", "action"),
    )

    def __repr__(self) -> str:
        return f"<AuditEvent {self.id}: {self.action} {self.result} tenant={self.tenant_id}>"
