"""
Base repository for the tutoring-center backend.

Repositories own every query the services run. They never commit: the
calling service decides transaction boundaries. Database failures are logged
and re-raised as ``RepositoryException`` so services handle a single error
type regardless of driver.
"""

import logging
from typing import Generic, Type, TypeVar

from sqlalchemy.orm import Session

from ..database import get_dialect_name

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Shared plumbing for concrete repositories.

    Attributes:
        db: Request-scoped SQLAlchemy session, owned by the service
        model: Primary ORM model of the repository
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        """Backend name ('postgresql', 'sqlite', ...) for dialect-specific statements."""
        return get_dialect_name(self.db)
