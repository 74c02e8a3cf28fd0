# backend/tutorcenter/repositories/__init__.py
"""
Repository Pattern Implementation for the tutoring-center backend

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories (session, model, dialect)
- RepositoryFactory: Factory for creating repository instances
- SessionIndexRepository: Existing sessions at candidate start instants
- SessionRepository: Skip-on-conflict inserts of generated sessions and rosters
- SchedulingReferenceRepository: Tenant-scoped center, tutor, student and group checks
- AuditRepository: Audit trail writes

Usage:
    from tutorcenter.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_session_index_repository(db)
    index = repository.load_index(tenant_id, center_id, tutor_id, start_instants)
"""

from .audit_repository import AuditRepository
from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .scheduling_reference_repository import SchedulingReferenceRepository
from .session_index_repository import SessionIndexRepository
from .session_repository import InsertedSession, SessionRepository

__all__ = [
    "AuditRepository",
    "BaseRepository",
    "InsertedSession",
    "RepositoryFactory",
    "SchedulingReferenceRepository",
    "SessionIndexRepository",
    "SessionRepository",
]
