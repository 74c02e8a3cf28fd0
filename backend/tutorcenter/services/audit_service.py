# backend/tutorcenter/services/audit_service.py
"""
Audit trail writer.

Audit events are written after the audited work has finished, each in its
own short transaction. Writing is best effort: a failed audit write is logged
at ERROR and never changes the outcome of the audited operation.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import DomainException, RepositoryException
from ..domain.generation import GenerationRequest
from ..models.audit_event import AuditEvent, AuditResult
from ..repositories.audit_repository import AuditRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .session_commit_executor import CommitResult

SESSIONS_GENERATED = "sessions.generated"
SESSION_ENTITY = "SESSION"

UNKNOWN_ERROR_CODE = "INTERNAL_ERROR"

MAX_METADATA_KEYS = 20
MAX_STRING_LENGTH = 200
_SECRET_KEY_MARKERS = ("password", "secret", "token", "hash", "access_code")


def _normalize_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        trimmed = value.strip()
        if len(trimmed) > MAX_STRING_LENGTH:
            return {"length": len(trimmed)}
        return trimmed
    return value


def sanitize_metadata(metadata: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Shallow copy of ``metadata`` without secret-looking keys or long strings."""
    if not metadata:
        return None
    cleaned: Dict[str, Any] = {}
    for key, value in list(metadata.items())[:MAX_METADATA_KEYS]:
        if any(marker in key.lower() for marker in _SECRET_KEY_MARKERS):
            continue
        cleaned[key] = _normalize_value(value)
    return cleaned or None


def error_code_for(error: BaseException) -> str:
    if isinstance(error, DomainException):
        return error.code
    return UNKNOWN_ERROR_CODE


class AuditService(BaseService):
    """Create and persist tenant audit events."""

    def __init__(self, db: Session, audit_repository: Optional[AuditRepository] = None):
        super().__init__(db)
        self.audit_repository = audit_repository or RepositoryFactory.create_audit_repository(db)

    def log(
        self,
        tenant_id: str,
        action: str,
        *,
        result: AuditResult,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Optional[AuditEvent]:
        """
        Write one audit event and commit it.

        Returns:
            The stored event, or None when nothing could be written
        """
        if not (tenant_id or "").strip():
            self.logger.error(f"Audit event {action} has no tenant and was not written")
            return None

        event = AuditEvent(
            tenant_id=tenant_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            result=result.value,
            metadata_json=sanitize_metadata(metadata),
        )
        try:
            self.audit_repository.write(event)
            self.db.commit()
        except (SQLAlchemyError, RepositoryException) as e:
            self.db.rollback()
            self.logger.error(f"Failed to write audit event {action}: {str(e)}", exc_info=True)
            return None
        return event

    def record_sessions_generated(
        self, tenant_id: str, request: GenerationRequest, result: CommitResult
    ) -> Optional[AuditEvent]:
        return self.log(
            tenant_id,
            SESSIONS_GENERATED,
            result=AuditResult.SUCCESS,
            entity_type=SESSION_ENTITY,
            entity_id=request.group_id or request.center_id,
            metadata={
                "sessions_created_count": result.created_count,
                "sessions_updated_count": 0,
                "sessions_skipped_count": result.skipped_duplicate_count + result.conflict_count,
                "input_range_from": request.start_date,
                "input_range_to": request.end_date,
            },
        )

    def record_sessions_generation_failed(
        self, tenant_id: str, request: GenerationRequest, error: BaseException
    ) -> Optional[AuditEvent]:
        return self.log(
            tenant_id,
            SESSIONS_GENERATED,
            result=AuditResult.FAILURE,
            entity_type=SESSION_ENTITY,
            entity_id=request.group_id or request.center_id,
            metadata={"error_code": error_code_for(error)},
        )
