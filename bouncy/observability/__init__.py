"""Observability module for metrics and monitoring."""

from bouncy.observability.metrics import (
    get_metrics,
    get_metrics_content_type,
    track_bulk_request,
    track_index_operation,
    track_search,
)

__all__ = [
    "get_metrics",
    "get_metrics_content_type",
    "track_bulk_request",
    "track_index_operation",
    "track_search",
]
