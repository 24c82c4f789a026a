"""
MediRate Admin Backend — Access Log Middleware
================================================

What:  One log line per request on the `medirate.access` logger.
How:   Measures wall time around the downstream app and logs method, path,
       status, duration, request ID and client address. The level follows
       the status class: 5xx → ERROR, 4xx → WARNING, otherwise INFO.

Never logged: request bodies (contact form text, role changes), the
Authorization header, query strings.

Example:
    2025-01-15T12:00:00 [WARNING] medirate.access: DELETE /api/admin/delete-bill 403 4.2ms [a1b2c3d4] from 10.0.0.7
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from medirate.middleware.request_id import request_id_var

logger = logging.getLogger("medirate.access")

# Platform probes hit these every few seconds
QUIET_PATHS = frozenset({"/health"})


def client_address(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        status = response.status_code
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        rid = request_id_var.get("")
        client_ip = client_address(request)
        logger.log(
            level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
