"""Request ID middleware — unique ID per request, plus one access log line.

Learn: Every request gets a UUID, either from the incoming
X-Request-ID header (for distributed tracing) or auto-generated.
The ID and the request path are bound to structlog's contextvars so
they appear in all log entries for that request (including the auth
rejections, which never show up in the response body).

When the request finishes, a single "request.completed" line records
the status, the duration and who made the call. The identity is read
from request.state, where both auth gates leave it, so the line shows
whether the caller came in with a bearer token or a browser session.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        started = time.perf_counter()

        response: Response = await call_next(request)

        identity = getattr(request.state, "identity", None)
        logger.info(
            "request.completed",
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
            user=identity.username if identity else None,
            auth=identity.source if identity else None,
        )
        response.headers["X-Request-ID"] = request_id
        return response
