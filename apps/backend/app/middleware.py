"""Request logging and per-client token-bucket rate limiting."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from pdftool.core.utils import get_logger
from pdftool.exceptions import ErrorCode

from .errors import error_response

LOGGER = get_logger("pdftool.http")

UNLIMITED_PATHS = frozenset({"/health", "/ready", "/metrics"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = round((time.perf_counter() - start) * 1000, 2)
        LOGGER.info(
            "HTTP Request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": latency_ms,
            },
        )
        return response


@dataclass
class _Bucket:
    tokens: float
    updated: float


class TokenBucketLimiter:
    """Refills ``requests_per_minute`` tokens per minute up to ``burst``."""

    def __init__(
        self, requests_per_minute: int, burst: int, *, clock=time.monotonic, max_clients: int = 10_000
    ) -> None:
        self.rate = requests_per_minute / 60.0
        self.capacity = float(burst)
        self._clock = clock
        self.max_clients = max_clients
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                if len(self._buckets) >= self.max_clients:
                    self._evict_full(now)
                bucket = self._buckets[key] = _Bucket(self.capacity, now)
            bucket.tokens = min(self.capacity, bucket.tokens + (now - bucket.updated) * self.rate)
            bucket.updated = now
            if bucket.tokens < 1:
                return False
            bucket.tokens -= 1
            return True

    def _evict_full(self, now: float) -> None:
        # A bucket idle long enough to refill completely carries no state.
        refill_seconds = self.capacity / self.rate if self.rate else 0.0
        for key in [key for key, bucket in self._buckets.items() if now - bucket.updated >= refill_seconds]:
            del self._buckets[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: TokenBucketLimiter) -> None:
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)
        client = request.client.host if request.client else "anonymous"
        if not self.limiter.allow(client):
            LOGGER.warning("Rate limit exceeded", extra={"client": client, "path": request.url.path})
            return error_response(429, "Rate limit exceeded", ErrorCode.RATE_LIMITED)
        return await call_next(request)


__all__ = ["RequestLoggingMiddleware", "RateLimitMiddleware", "TokenBucketLimiter"]
