# backend/tutorcenter/services/base.py
"""
Base service for the tutoring-center backend.

Services hold the request-scoped session and own the transaction boundary.
This module gives every service:
- ``transaction()``: commit on success, roll back on any failure
- ``measure_operation``: timing, slow-call warnings and Prometheus recording
- ``get_metrics()``: in-process per-operation timing summary
"""

from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import PersistenceError, RepositoryException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


@dataclass
class OperationStats:
    count: int = 0
    failures: int = 0
    total_time: float = 0.0
    min_time: float = float("inf")
    max_time: float = 0.0

    def add(self, elapsed: float, success: bool) -> None:
        self.count += 1
        self.total_time += elapsed
        self.min_time = min(self.min_time, elapsed)
        self.max_time = max(self.max_time, elapsed)
        if not success:
            self.failures += 1

    def summary(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "avg_time": self.total_time / self.count,
            "min_time": self.min_time,
            "max_time": self.max_time,
            "success_rate": (self.count - self.failures) / self.count,
            "failure_count": self.failures,
        }


class BaseService:
    """
    Base class for service layer components.

    Subclasses receive the session from the route dependency and never
    create sessions of their own.
    """

    # service class name -> operation name -> stats
    _class_metrics: Dict[str, Dict[str, OperationStats]] = {}

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Run a unit of work in one database transaction.

        Usage:
            with self.transaction():
                plan = self._plan_request(...)
                self.commit_executor.execute(...)

        Raises:
            PersistenceError: The database or a repository failed; nothing was kept
        """
        try:
            yield self.db
            self.db.commit()
        except (SQLAlchemyError, RepositoryException) as e:
            self.logger.error(f"Transaction rolled back after database failure: {str(e)}")
            self.db.rollback()
            raise PersistenceError("Database operation failed", operation="transaction") from e
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and publish the result.

        Usage:
            @BaseService.measure_operation("preview_session_generation")
            def preview(self, tenant_id, request):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                started = time.perf_counter()
                error_type = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    elapsed = time.perf_counter() - started
                    self._record_metric(operation_name, elapsed, error_type is None)
                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )
                    try:
                        prometheus_metrics.record_service_operation(
                            service=self.__class__.__name__,
                            operation=operation_name,
                            duration=elapsed,
                            status="success" if error_type is None else "error",
                            error_type=error_type,
                        )
                    except Exception as metrics_error:
                        # Metrics collection never breaks the operation
                        logger.debug(f"Failed to record metrics for {operation_name}: {metrics_error}")

            wrapper._operation_name = operation_name  # type: ignore[attr-defined]
            return cast(F, wrapper)

        return decorator

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        per_service = BaseService._class_metrics.setdefault(self.__class__.__name__, {})
        per_service.setdefault(operation, OperationStats()).add(elapsed, success)

    def get_metrics(self) -> Dict[str, Any]:
        """Timing summary for each measured operation of this service class."""
        per_service = BaseService._class_metrics.get(self.__class__.__name__, {})
        return {name: stats.summary() for name, stats in per_service.items() if stats.count}
