"""
Prometheus metrics middleware for the Automagixx chatbot API.

Exposes /metrics endpoint with request counters, latency histograms,
and chat business metrics.
"""

import logging
import time

from fastapi import Request, Response
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, CONTENT_TYPE_LATEST,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Request metrics
REQUEST_COUNT = Counter(
    "automagixx_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "automagixx_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
ACTIVE_REQUESTS = Gauge(
    "automagixx_http_active_requests",
    "Currently active HTTP requests",
)

# Business metrics
INTENT_COUNT = Counter(
    "automagixx_intent_tags_total",
    "Intent tags detected on visitor messages",
    ["tag"],
)
CHAT_LATENCY = Histogram(
    "automagixx_chat_duration_seconds",
    "Message pipeline latency",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)
FALLBACK_COUNT = Counter(
    "automagixx_chat_fallbacks_total",
    "Replies replaced by the fallback message",
)
CHATBOTS_CREATED = Counter(
    "automagixx_chatbots_created_total",
    "Tenant chatbots created",
)


def record_chat(intent_tags, processing_time_ms: float, fallback_used: bool):
    """Record the outcome of one chat message."""
    for tag in intent_tags:
        INTENT_COUNT.labels(tag=tag).inc()
    CHAT_LATENCY.observe(processing_time_ms / 1000)
    if fallback_used:
        FALLBACK_COUNT.inc()


def record_chatbot_created():
    CHATBOTS_CREATED.inc()


def _endpoint_label(request: Request) -> str:
    """Route template rather than raw path, so tenant ids don't explode label cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware that records HTTP request metrics."""

    async def dispatch(self, request: Request, call_next):
        ACTIVE_REQUESTS.inc()
        start = time.time()

        try:
            response = await call_next(request)
        finally:
            ACTIVE_REQUESTS.dec()

        duration = time.time() - start
        endpoint = _endpoint_label(request)

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        REQUEST_LATENCY.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
