# backend/tutorcenter/routes/v1/health.py
"""
Health check endpoints for monitoring and load balancer probes.
"""

from __future__ import annotations

from datetime import datetime, timezone
import os

from fastapi import APIRouter, Response

from ...core.config import settings
from ...core.constants import API_VERSION, BRAND_NAME
from ...schemas.health import HealthResponse

router = APIRouter(tags=["health"])


def _resolve_git_sha() -> str:
    for candidate in (os.getenv("GIT_SHA"), os.getenv("COMMIT_SHA")):
        if candidate and candidate.strip():
            return candidate.strip()
    return "unknown"


@router.get("", response_model=HealthResponse)
def health_check(response: Response) -> HealthResponse:
    """
    Health check endpoint.

    Returns basic health status including service info and environment.
    Does not touch the database.
    """
    response.headers["X-Site-Mode"] = os.getenv("SITE_MODE", "").lower().strip() or "unset"
    return HealthResponse(
        status="healthy",
        service=f"{BRAND_NAME.lower()}-api",
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        git_sha=_resolve_git_sha(),
    )
