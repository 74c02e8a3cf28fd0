"""FastAPI dependencies shared by the route modules."""

from .database import get_db
from .services import get_session_generation_service
from .tenant import get_tenant_id

__all__ = ["get_db", "get_session_generation_service", "get_tenant_id"]
