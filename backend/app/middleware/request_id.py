"""Request ID middleware for request tracing.

Reads X-Request-ID from the incoming request header or generates a UUID4.
The ID is stored in a contextvars.ContextVar for use in logging and
propagated back as a response header. The middleware also records the
per-route HTTP metrics.
"""

import contextvars
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.metrics import http_request_duration_seconds, http_requests_total

# Context variable accessible from anywhere in the same async task
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=""
)


def _route_path(request: Request) -> str:
    # Label by route template, not raw path, to keep metric cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_var.set(rid)
        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            path = _route_path(request)
            http_requests_total.labels(
                method=request.method, path=path, status=str(response.status_code)
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method, path=path
            ).observe(time.perf_counter() - start)
            return response
        finally:
            request_id_var.reset(token)


def get_request_id() -> str:
    """Get the current request ID (empty string if not in a request context)."""
    return request_id_var.get()
