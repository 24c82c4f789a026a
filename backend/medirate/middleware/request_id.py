"""
MediRate Admin Backend — Request ID Middleware
================================================

What:  Assigns a short correlation ID to every request and echoes it back in
       the `X-Request-ID` response header.
How:   Reuses an incoming `X-Request-ID` when the caller (or the hosting
       platform's edge) supplies one, otherwise generates one. The ID is
       stored in a ContextVar so error handlers and log lines can include it
       without threading it through every call.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_INCOMING_ID_LENGTH = 64


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        incoming = request.headers.get("X-Request-ID", "")
        # Oversized or empty client IDs are replaced, not trusted
        rid = incoming if 0 < len(incoming) <= MAX_INCOMING_ID_LENGTH else new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
