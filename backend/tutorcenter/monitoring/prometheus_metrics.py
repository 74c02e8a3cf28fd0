"""
Prometheus metrics for the tutoring-center backend.

Two families live in a private registry:

- service timings, fed by ``BaseService.measure_operation``;
- recurring generation counters: occurrences per (phase, outcome) and
  planned creates lost to a concurrent writer at insert time.

The text exposition is cached briefly because scrapes are far more frequent
than generation calls.
"""

import os
from threading import Lock
from time import monotonic
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "tutorcenter_service_operation_duration_seconds",
    "Wall time of measured service operations",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

service_operations_total = Counter(
    "tutorcenter_service_operations_total",
    "Measured service operations by outcome status",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "tutorcenter_errors_total",
    "Measured service operations that raised, by exception type",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

session_generation_occurrences_total = Counter(
    "session_generation_occurrences_total",
    "Candidate occurrences classified by recurring session generation",
    ["phase", "outcome"],
    registry=REGISTRY,
)

session_generation_commit_drift_total = Counter(
    "session_generation_commit_drift_total",
    "Planned creates skipped at insert time because the slot was taken concurrently",
    registry=REGISTRY,
)


def _exposition_ttl() -> float:
    site_mode = (os.getenv("SITE_MODE") or "").strip().lower()
    return 2.0 if site_mode in {"ci", "test"} else 1.0


class _ExpositionCache:
    """Thread-safe, time-boxed copy of the registry's text exposition."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._payload: Optional[bytes] = None
        self._rendered_at = 0.0

    def get(self) -> bytes:
        with self._lock:
            stale = monotonic() - self._rendered_at > _exposition_ttl()
            if self._payload is None or stale:
                self._payload = generate_latest(REGISTRY)
                self._rendered_at = monotonic()
            return self._payload

    def clear(self) -> None:
        with self._lock:
            self._payload = None


class PrometheusMetrics:
    """Recording and exposition entry points used by services and routes."""

    def __init__(self) -> None:
        self._cache = _ExpositionCache()

    def record_service_operation(
        self,
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record one measured call.

        Args:
            service: Service class name (e.g. 'SessionGenerationService')
            operation: Name given to @measure_operation (e.g. 'commit_session_generation')
            duration: Elapsed seconds
            status: 'success' or 'error'
            error_type: Exception class name when status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()
        self._cache.clear()

    def record_generation_outcome(self, phase: str, outcome: str, count: int) -> None:
        """Add ``count`` classified occurrences for a phase (preview|commit)."""
        if count <= 0:
            return
        session_generation_occurrences_total.labels(phase=phase, outcome=outcome).inc(count)
        self._cache.clear()

    def record_commit_drift(self, count: int) -> None:
        """Count planned creates that lost their slot between planning and insert."""
        if count <= 0:
            return
        session_generation_commit_drift_total.inc(count)
        self._cache.clear()

    def get_metrics(self) -> bytes:
        """Text exposition of the registry, at most one TTL old."""
        return self._cache.get()

    def invalidate_cache(self) -> None:
        self._cache.clear()

    @staticmethod
    def get_content_type() -> str:
        return str(CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
