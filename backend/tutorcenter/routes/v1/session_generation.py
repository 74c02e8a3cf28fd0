# backend/tutorcenter/routes/v1/session_generation.py
"""
Recurring session generation routes - API v1

Two endpoints share one request body:

- POST /api/v1/sessions/generate/preview - classify without writing
- POST /api/v1/sessions/generate - insert the creatable sessions

The engine is synchronous (SQLAlchemy ORM), so each call runs in a worker
thread to keep the event loop free.
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from ...api.dependencies.services import get_session_generation_service
from ...api.dependencies.tenant import get_tenant_id
from ...core.exceptions import DomainException
from ...schemas.session_generation import (
    SessionGenerationCommitResponse,
    SessionGenerationPreviewResponse,
    SessionGenerationRequest,
)
from ...services.session_generation_service import SessionGenerationService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["sessions-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post(
    "/generate/preview",
    response_model=SessionGenerationPreviewResponse,
    responses={400: {"description": "Invalid recurrence request"}},
)
async def preview_session_generation(
    payload: SessionGenerationRequest,
    tenant_id: str = Depends(get_tenant_id),
    service: SessionGenerationService = Depends(get_session_generation_service),
) -> SessionGenerationPreviewResponse:
    """
    Preview a recurring generation.

    Returns how many sessions a commit would create, skip as duplicates or
    skip as tutor/student conflicts, with a bounded sample of each skip kind.
    Nothing is persisted.
    """
    try:
        request = payload.to_domain()
        plan = await asyncio.to_thread(service.preview, tenant_id, request)
        return SessionGenerationPreviewResponse.from_plan(plan)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/generate",
    response_model=SessionGenerationCommitResponse,
    responses={
        400: {"description": "Invalid recurrence request"},
        500: {"description": "Sessions could not be persisted; nothing was written"},
    },
)
async def commit_session_generation(
    payload: SessionGenerationRequest,
    tenant_id: str = Depends(get_tenant_id),
    service: SessionGenerationService = Depends(get_session_generation_service),
) -> SessionGenerationCommitResponse:
    """
    Generate recurring sessions.

    Re-plans against the current database state and inserts the creatable
    occurrences with skip-on-conflict semantics. Counts reflect what was
    actually persisted, including slots taken by concurrent writers.
    """
    try:
        request = payload.to_domain()
        result = await asyncio.to_thread(service.commit, tenant_id, request)
        return SessionGenerationCommitResponse.from_result(result)
    except DomainException as e:
        handle_domain_exception(e)
