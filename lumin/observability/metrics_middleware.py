"""
FastAPI middleware for automatic Prometheus metrics collection.

Tracks request counts by endpoint, method and status code, and request
latency histograms.
"""

import logging
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from lumin.observability.metrics import (
    http_requests_total,
    http_request_duration_seconds,
)

logger = logging.getLogger(__name__)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        method = request.method
        path = normalize_path(request.url.path)
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration = time.perf_counter() - start_time
            http_requests_total.labels(
                method=method, endpoint=path, status=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=method, endpoint=path
            ).observe(duration)

        return response


def normalize_path(path: str) -> str:
    """
    Normalize request path to reduce cardinality.

    For example:
    - /api/entries/3f2b...-uuid -> /api/entries/{id}
    - /api/goals/<uuid>/milestones/<uuid> -> /api/goals/{id}/milestones/{id}
    """
    if path in ("/metrics", "/health", "/"):
        return path

    parts = []
    for part in path.strip("/").split("/"):
        if part.isdigit() or _is_uuid(part):
            parts.append("{id}")
        else:
            parts.append(part)
    return "/" + "/".join(parts)


def _is_uuid(value: str) -> bool:
    """Check if a string looks like a UUID (8-4-4-4-12 hex digits)."""
    parts = value.split("-")
    if [len(p) for p in parts] != [8, 4, 4, 4, 12]:
        return False
    try:
        for part in parts:
            int(part, 16)
        return True
    except ValueError:
        return False


def setup_metrics_middleware(app) -> None:
    """Add Prometheus metrics middleware to the FastAPI application."""
    from lumin.config import ENABLE_PROMETHEUS

    if not ENABLE_PROMETHEUS:
        logger.info("Metrics collection is disabled (ENABLE_PROMETHEUS=false)")
        return

    app.add_middleware(PrometheusMiddleware)
    logger.info("Prometheus metrics middleware added to FastAPI")
