# backend/tutorcenter/api/dependencies/services.py
"""
Service layer dependencies.

Each request gets its own service instance bound to the request-scoped session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.session_generation_service import SessionGenerationService
from .database import get_db


def get_session_generation_service(db: Session = Depends(get_db)) -> SessionGenerationService:
    """Get recurring session generation service instance."""
    return SessionGenerationService(db)
