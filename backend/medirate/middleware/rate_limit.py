"""
MediRate Admin Backend — Rate Limiting Middleware
===================================================

What:  Per-client sliding window limit on API requests.
How:   Keeps a deque of request timestamps per client address. Timestamps
       older than RATE_LIMIT_WINDOW are dropped on each request; once
       RATE_LIMIT_REQUESTS remain, the request is answered with 429 and a
       Retry-After header.

The counters live in process memory. Each worker enforces its own limit,
so the effective ceiling is RATE_LIMIT_REQUESTS × workers.

The 429 body is built here from RateLimitExceededError: middleware runs
outside FastAPI's exception handlers, so raising would surface as a 500.
RequestIDMiddleware wraps this one, so the body carries the request ID.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from medirate.config import settings
from medirate.exceptions import RateLimitExceededError
from medirate.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Sweep idle clients every this many requests
SWEEP_INTERVAL = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):

    EXCLUDED_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})

    def __init__(self, app, limit: int | None = None, window: int | None = None, **kwargs):
        super().__init__(app, **kwargs)
        self.limit = limit or settings.rate_limit_requests
        self.window = window or settings.rate_limit_window
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        # Keyed on the socket peer; X-Forwarded-For is client-controlled
        client = request.client.host if request.client else "unknown"
        now = time.monotonic()
        hits = self._hits[client]
        while hits and hits[0] <= now - self.window:
            hits.popleft()

        if len(hits) >= self.limit:
            exc = RateLimitExceededError(retry_after=int(hits[0] + self.window - now) + 1)
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds", client, len(hits), self.window
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        hits.append(now)
        self._seen += 1
        if self._seen % SWEEP_INTERVAL == 0:
            self._sweep(now)

        return await call_next(request)

    def _sweep(self, now: float) -> None:
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= now - self.window]
        for ip in idle:
            del self._hits[ip]
        if idle:
            logger.debug("Dropped %d idle rate limit entries", len(idle))
