"""Prometheus metrics for index synchronization.

Provides instrumentation for:
- Single-document index operations (latency, counts by outcome)
- Bulk request sizes
- Search result sizes
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)

INDEX_OPERATION_DURATION = Histogram(
    "bouncy_index_operation_duration_seconds",
    "Elasticsearch operation duration in seconds",
    ["operation", "status"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

INDEX_OPERATION_TOTAL = Counter(
    "bouncy_index_operations_total",
    "Total Elasticsearch operations",
    ["operation", "status"],
)

BULK_ACTIONS = Histogram(
    "bouncy_bulk_actions",
    "Number of actions per bulk request",
    ["action"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000],
)

SEARCH_HITS_RETURNED = Histogram(
    "bouncy_search_hits_returned",
    "Number of hits returned per search",
    buckets=[0, 1, 5, 10, 50, 100, 500, 1000],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for a metrics response."""
    return CONTENT_TYPE_LATEST


def track_index_operation(
    operation: str,
    duration: float,
    status: str,
) -> None:
    """Track a single Elasticsearch operation.

    Args:
        operation: Operation name (index, update, delete, bulk, search...).
        duration: Request duration in seconds.
        status: Outcome label (success, not_found, version_conflict, error).
    """
    INDEX_OPERATION_DURATION.labels(operation=operation, status=status).observe(duration)
    INDEX_OPERATION_TOTAL.labels(operation=operation, status=status).inc()


def track_bulk_request(action: str, size: int) -> None:
    """Track the number of records sent in a bulk request."""
    BULK_ACTIONS.labels(action=action).observe(size)


def track_search(hits_returned: int) -> None:
    """Track the number of hits returned by a search."""
    SEARCH_HITS_RETURNED.observe(hits_returned)
