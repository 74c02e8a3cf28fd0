# backend/tutorcenter/repositories/audit_repository.py
"""
Audit Repository for the tutoring-center backend

Persists audit trail events inside the caller's transaction.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.audit_event import AuditEvent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AuditRepository(BaseRepository[AuditEvent]):
    """Write path for audit events."""

    def __init__(self, db: Session):
        super().__init__(db, AuditEvent)
        self.logger = logging.getLogger(__name__)

    def write(self, event: AuditEvent) -> AuditEvent:
        """Add ``event`` and flush so its defaults are populated."""
        try:
            self.db.add(event)
            self.db.flush()
            return event
        except SQLAlchemyError as e:
            self.logger.error(f"Error writing audit event {event.action}: {str(e)}")
            raise RepositoryException(f"Failed to write audit event: {str(e)}")
