"""
FastAPI middleware for automatic Prometheus metrics collection.

Tracks request counts, latency and in-flight requests per normalized route.
"""

import logging
import time
from typing import Callable
from uuid import UUID
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from microhabits.observability.metrics import (
    http_requests_total,
    http_request_duration_seconds,
    http_requests_in_progress,
)

logger = logging.getLogger(__name__)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        method = request.method
        path = normalize_path(request.url.path)

        http_requests_in_progress.labels(method=method, endpoint=path).inc()
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            http_requests_in_progress.labels(method=method, endpoint=path).dec()
            http_requests_total.labels(
                method=method, endpoint=path, status=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=method, endpoint=path
            ).observe(time.perf_counter() - start_time)


def normalize_path(path: str) -> str:
    """
    Replace ID segments so metrics keep a bounded label set.

    /api/habits/3f1c...-9a2e -> /api/habits/{id}
    """
    parts = []
    for part in path.strip("/").split("/"):
        if part.isdigit() or _is_uuid(part):
            parts.append("{id}")
        else:
            parts.append(part)
    return "/" + "/".join(parts)


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return len(value) == 36


def setup_metrics_middleware(app):
    """Add Prometheus metrics middleware to the FastAPI application."""
    from microhabits.config import ENABLE_METRICS

    if not ENABLE_METRICS:
        logger.info("Metrics collection is disabled (ENABLE_METRICS=false)")
        return

    app.add_middleware(PrometheusMiddleware)
    logger.info("Prometheus metrics middleware added to FastAPI")
