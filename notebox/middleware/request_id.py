"""
Notebox — Request ID Middleware
=================================

What:  Assigns an ID to each incoming request and returns it in X-Request-ID.
Why:   Lets every log line of one request, including error handler output,
       be correlated with what the client saw.
How:   Uses the client's X-Request-ID header when present, otherwise a short
       UUID; stores it in a ContextVar and on request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local storage for the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Use the client's X-Request-ID header if present
        2. Otherwise generate an 8-character UUID prefix
        3. Store in ContextVar (loggers, exception handlers) and request.state (handlers)
        4. Echo it in the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
