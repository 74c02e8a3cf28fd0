# backend/tutorcenter/api/dependencies/tenant.py
"""
Tenant resolution dependency.

Tenant resolution itself happens upstream; routes only read the resolved id
from the configured request header.
"""

from fastapi import Request

from ...core.config import settings
from ...core.exceptions import ValidationException


def get_tenant_id(request: Request) -> str:
    """
    Read the caller's tenant id from the tenant header.

    Raises:
        HTTPException: 400 when the header is missing or blank
    """
    tenant_id = (request.headers.get(settings.tenant_header) or "").strip()
    if not tenant_id:
        raise ValidationException(
            f"Missing {settings.tenant_header} header",
            code="TENANT_REQUIRED",
            details={"header": settings.tenant_header},
        ).to_http_exception()
    return tenant_id
