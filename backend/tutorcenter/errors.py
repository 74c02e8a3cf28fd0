"""
RFC 7807 problem responses for every error the API returns.

Request body validation failures are reported as 400, the same status the
engine uses for its own validation errors, so clients handle one code.
"""

from http import HTTPStatus
import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def _status_title(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def problem_response(
    request: Request,
    status: int,
    *,
    detail: Optional[str] = None,
    code: Optional[str] = None,
    errors: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build an ``application/problem+json`` response for ``request``."""
    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": _status_title(status),
        "status": status,
        "detail": detail or "",
        "instance": request.url.path,
    }
    if code:
        body["code"] = code
    if errors is not None:
        body["errors"] = jsonable_encoder(errors)
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers)


def _unpack_http_detail(detail: Any) -> Tuple[Optional[str], Optional[str], Any]:
    """Split an HTTPException detail into (message, code, errors)."""
    if detail is None:
        return None, None, None
    if not isinstance(detail, dict):
        return str(detail), None, None
    message = detail.get("message") or detail.get("detail")
    code = detail.get("code")
    return (
        message if isinstance(message, str) else None,
        code if isinstance(code, str) else None,
        detail.get("details") or detail.get("errors"),
    )


def _field_errors(errors: Any) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into ``{field, message, type}`` using wire names."""
    flattened: List[Dict[str, Any]] = []
    for error in errors:
        path = [str(part) for part in error.get("loc", ()) if part != "body"]
        flattened.append(
            {
                "field": ".".join(path) or None,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type"),
            }
        )
    return flattened


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message, code, errors = _unpack_http_detail(exc.detail)
        return problem_response(
            request,
            exc.status_code,
            detail=message,
            code=code,
            errors=errors,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        status = exc.to_http_exception().status_code
        return problem_response(
            request, status, detail=exc.message, code=exc.code, errors=exc.details or None
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return problem_response(
            request,
            400,
            detail="Request validation failed",
            code="validation_error",
            errors=_field_errors(exc.errors()),
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return problem_response(
            request,
            400,
            detail="Validation failed",
            code="validation_error",
            errors=_field_errors(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return problem_response(
            request, 500, detail="Internal Server Error", code="internal_server_error"
        )
