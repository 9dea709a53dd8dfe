"""Prometheus metrics middleware."""
import time

from fastapi import FastAPI, Request
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

# Metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

http_errors_total = Counter(
    "http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "error_type"],
)

# Event pipeline
system_events_recorded_total = Counter(
    "system_events_recorded_total",
    "System events appended to the audit log",
    ["type"],
)

system_events_processed_total = Counter(
    "system_events_processed_total",
    "System events marked processed",
    ["source"],  # immediate | sweep
)

admin_notifications_created_total = Counter(
    "admin_notifications_created_total",
    "Notification rows submitted by the admin fan-out",
)

event_pipeline_errors_total = Counter(
    "event_pipeline_errors_total",
    "Failures swallowed by the event pipeline",
    ["stage"],  # record | notify | sweep | mark
)


def _endpoint_label(request: Request) -> str:
    # Use the route template so ids don't explode label cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count requests and record their latency."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            endpoint = _endpoint_label(request)
            http_errors_total.labels(request.method, endpoint, type(exc).__name__).inc()
            raise

        endpoint = _endpoint_label(request)
        http_request_duration_seconds.labels(request.method, endpoint).observe(time.perf_counter() - start)
        http_requests_total.labels(request.method, endpoint, str(response.status_code)).inc()
        if response.status_code >= 500:
            http_errors_total.labels(request.method, endpoint, "server_error").inc()
        return response


def setup_metrics(app: FastAPI) -> None:
    """Setup Prometheus metrics endpoint."""

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
