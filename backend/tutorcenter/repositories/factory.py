# backend/tutorcenter/repositories/factory.py
"""
Repository Factory for the tutoring-center backend

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .audit_repository import AuditRepository
    from .scheduling_reference_repository import SchedulingReferenceRepository
    from .session_index_repository import SessionIndexRepository
    from .session_repository import SessionRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_audit_repository(db: Session) -> "AuditRepository":
        """Create repository for audit trail writes."""
        from .audit_repository import AuditRepository

        return AuditRepository(db)

    @staticmethod
    def create_session_index_repository(db: Session) -> "SessionIndexRepository":
        """Create repository for existing-session index lookups."""
        from .session_index_repository import SessionIndexRepository

        return SessionIndexRepository(db)

    @staticmethod
    def create_session_repository(db: Session) -> "SessionRepository":
        """Create repository for generated-session inserts."""
        from .session_repository import SessionRepository

        return SessionRepository(db)

    @staticmethod
    def create_scheduling_reference_repository(db: Session) -> "SchedulingReferenceRepository":
        """Create repository for center, tutor, student and group reference checks."""
        from .scheduling_reference_repository import SchedulingReferenceRepository

        return SchedulingReferenceRepository(db)
