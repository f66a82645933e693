"""
Rate limiting middleware for the Automagixx chatbot API.

Each client (the configured admin API key, else the remote address) gets a
sliding one-minute window of request timestamps. Monitoring and docs paths are never limited.
"""

import logging
import math
import secrets
import time
from collections import deque
from typing import Deque, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/metrics", "/docs", "/redoc", "/openapi.json"})


class SlidingWindow:
    """Timestamps of recent requests from one client."""

    def __init__(self, limit: int, window_seconds: float = 60.0):
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: Deque[float] = deque()

    def expire(self, now: float):
        cutoff = now - self.window_seconds
        while self._hits and self._hits[0] <= cutoff:
            self._hits.popleft()

    def try_acquire(self, now: float) -> bool:
        """Record a hit if the client is under its limit."""
        self.expire(now)
        if len(self._hits) >= self.limit:
            return False
        self._hits.append(now)
        return True

    def retry_after(self, now: float) -> int:
        """Seconds until the oldest hit leaves the window."""
        if not self._hits:
            return 0
        return max(1, math.ceil(self._hits[0] + self.window_seconds - now))

    @property
    def remaining(self) -> int:
        return max(0, self.limit - len(self._hits))

    @property
    def empty(self) -> bool:
        return not self._hits


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client sliding-window rate limiter returning 429 JSON bodies."""

    def __init__(self, app, requests_per_minute: int = 100, admin_api_key: Optional[str] = None):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.admin_api_key = admin_api_key
        self._windows: Dict[str, SlidingWindow] = {}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_id = client_key(request, self.admin_api_key)
        now = time.monotonic()
        window = self._windows.get(client_id)
        if window is None:
            window = self._windows[client_id] = SlidingWindow(self.requests_per_minute)

        if not window.try_acquire(now):
            logger.warning(f"Rate limit exceeded for {client_id}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests. Please try again later."},
                headers={"Retry-After": str(window.retry_after(now))},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(window.remaining)
        self._prune(now)
        return response

    def _prune(self, now: float):
        """Drop windows of clients that have gone quiet."""
        if len(self._windows) < 1024:
            return
        for client_id in list(self._windows):
            window = self._windows[client_id]
            window.expire(now)
            if window.empty:
                del self._windows[client_id]


def client_key(request: Request, admin_api_key: Optional[str] = None) -> str:
    """Bucket key: the admin API key when it is the configured one, else the remote address."""
    api_key: Optional[str] = request.headers.get("X-API-Key")
    if api_key and admin_api_key and secrets.compare_digest(api_key, admin_api_key):
        return f"key:{api_key[:8]}"
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"
