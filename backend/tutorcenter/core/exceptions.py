# backend/tutorcenter/core/exceptions.py
"""
Domain-specific exceptions for the tutoring-center backend.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *,
        field: Optional[str] = None,
    ) -> None:
        merged = dict(details or {})
        if field is not None:
            merged.setdefault("field", field)
        super().__init__(message, code=code, details=merged)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Recurrence and time-resolution errors


class InvalidTimeZone(ValidationException):
    """Raised when a timezone name is not a recognized IANA zone."""

    def __init__(self, timezone_name: str, *, field: str = "timezone"):
        super().__init__(
            message="Invalid timezone",
            code="INVALID_TIMEZONE",
            details={"timezone": timezone_name},
            field=field,
        )


class InvalidLocalTime(ValidationException):
    """Raised when a local date or HH:mm time does not parse."""

    def __init__(self, value: str, *, field: str, expected: str):
        super().__init__(
            message=f"Invalid {field}: {value!r}. Expected {expected}.",
            code="INVALID_LOCAL_TIME",
            details={"value": value, "expected": expected},
            field=field,
        )


class EmptyWeekdaySelection(ValidationException):
    """Raised when a recurrence rule selects no weekdays."""

    def __init__(self) -> None:
        super().__init__(
            message="At least one weekday must be selected",
            code="EMPTY_WEEKDAY_SELECTION",
            field="weekdays",
        )


class InvalidDateRange(ValidationException):
    """Raised when endDate precedes startDate."""

    def __init__(self, start_date: str, end_date: str):
        super().__init__(
            message="endDate must be on or after startDate",
            code="INVALID_DATE_RANGE",
            details={"start_date": start_date, "end_date": end_date},
            field="endDate",
        )


class OccurrenceLimitExceeded(ValidationException):
    """Raised when a recurrence rule would expand past the configured ceiling."""

    def __init__(self, *, limit: int, requested: int, unit: str):
        super().__init__(
            message=f"Recurrence expands to {requested} {unit}; the maximum is {limit}",
            code="OCCURRENCE_LIMIT_EXCEEDED",
            details={"limit": limit, "requested": requested, "unit": unit},
            field="endDate",
        )


class InvalidRecurrenceRequest(ValidationException):
    """Raised when a generation request fails a cross-field or reference check."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message=message, code="INVALID_GENERATION_REQUEST", field=field)


class PersistenceError(ServiceException):
    """Raised when the database fails while reading the index or committing sessions."""

    def __init__(self, message: str, *, operation: str):
        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR",
            details={"operation": operation},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations outside the expected duplicate key.
    """
