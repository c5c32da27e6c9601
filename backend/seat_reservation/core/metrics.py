"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Reservation outcomes
reservation_attempts = Counter(
    'reservation_attempts_total',
    'Total seat reservation requests by outcome',
    ['status']  # success, conflict, busy, timeout, invalid, error
)

reservation_latency = Histogram(
    'reservation_latency_seconds',
    'End-to-end reservation latency including retries',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

reservation_retries = Counter(
    'reservation_retry_attempts_total',
    'Reservation retries caused by ledger version conflicts'
)

# Ledger compare-and-set results
ledger_commits = Counter(
    'ledger_commit_attempts_total',
    'Conditional ledger writes by result',
    ['result']  # committed, version_conflict
)

# Availability cache
cache_operations = Counter(
    'availability_cache_operations_total',
    'Availability cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_reservation(status: str):
    """Record reservation outcome. Status: success, conflict, busy, timeout, invalid, error"""
    reservation_attempts.labels(status=status).inc()


def record_ledger_commit(committed: bool):
    result = "committed" if committed else "version_conflict"
    ledger_commits.labels(result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
