"""
Notebox — Access Log Middleware
=================================

What:  One access log line per note request, keyed by route template.
Why:   /note/1 and /note/2 are the same handler; logging the template
       ("/note/{note_id}") keeps log aggregation per operation, and the id that
       was asked for travels as its own field.
How:   After the downstream call, read the matched route and path params the
       router left in the ASGI scope, then log at a level chosen by the
       business-facing HTTP status.

Fields (as `extra` on the record):
    request_id, method, route, note_id, status, duration_ms, client_ip
Note bodies are never logged.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notebox.middleware.request_id import request_id_var

logger = logging.getLogger("notebox.access")

_UNLOGGED_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _route_template(request: Request) -> str:
    """Path template of the matched route, or the raw path when nothing matched (404/405)."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for the note API; /health is skipped."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        route = _route_template(request)
        note_id: Optional[str] = request.scope.get("path_params", {}).get("note_id")
        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"

        target = f"{route} id={note_id}" if note_id is not None else route
        logger.log(
            _level_for(response.status_code),
            "[%s] %s %s -> %d (%.1fms)",
            rid,
            request.method,
            target,
            response.status_code,
            duration_ms,
            extra={
                "request_id": rid,
                "method": request.method,
                "route": route,
                "note_id": note_id,
                "status": response.status_code,
                "duration_ms": duration_ms,
                "client_ip": client_ip,
            },
        )
        return response
