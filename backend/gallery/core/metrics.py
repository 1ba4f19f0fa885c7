"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Exhibition write metrics
exhibition_writes = Counter(
    'exhibition_writes_total',
    'Exhibition write attempts',
    ['operation', 'result']  # create/update/delete x success/conflict/stale/invalid/error
)

write_latency = Histogram(
    'serialized_write_latency_seconds',
    'Conflict-checked transaction latency, retries included',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Transaction metrics
write_retries = Counter(
    'serialized_write_retries_total',
    'Transaction retries after lock contention or timeout',
    ['operation']
)

write_failures = Counter(
    'serialized_write_failures_total',
    'Transactions abandoned after storage errors',
    ['kind']  # transient, unexpected
)

# Read-side metrics
availability_checks = Counter(
    'availability_checks_total',
    'Location availability checks',
    ['result']  # available, unavailable
)

deletion_guard_checks = Counter(
    'deletion_guard_checks_total',
    'Referential guard decisions before artwork/location deletion',
    ['entity', 'result']  # allowed, blocked
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_exhibition_write(operation: str, result: str):
    """Result: success, conflict, stale, invalid, not_found, error"""
    exhibition_writes.labels(operation=operation, result=result).inc()


def record_write_retry(operation: str):
    write_retries.labels(operation=operation).inc()


def record_write_failure(kind: str):
    write_failures.labels(kind=kind).inc()


def record_availability(available: bool):
    availability_checks.labels(result="available" if available else "unavailable").inc()


def record_deletion_guard(entity: str, allowed: bool):
    deletion_guard_checks.labels(entity=entity, result="allowed" if allowed else "blocked").inc()
