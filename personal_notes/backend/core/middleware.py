"""
Request Context Middleware.

Middleware for request tracking, timing, frontend identification, and
log context propagation.
"""

import uuid
from datetime import datetime, timezone

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from personal_notes.backend.core.logging import get_logger

logger = get_logger(__name__)

# Values accepted in X-Frontend-ID; anything else is logged as "unknown"
KNOWN_FRONTENDS = {"web", "cli", "api", "internal"}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds request context to every request.

    - Generates or propagates request ID (X-Request-ID header)
    - Extracts frontend identifier (X-Frontend-ID header)
    - Records request timing (X-Response-Time header)
    - Binds request context to structlog for automatic inclusion in logs
    - Stores context in request.state for access by handlers

    Headers:
    - X-Request-ID: Echoed back, or a new UUID4 when absent
    - X-Frontend-ID: Caller type, one of KNOWN_FRONTENDS
    - X-Response-Time: Handler duration in milliseconds, e.g. "12ms"

    Usage:
        Every log line emitted while serving the request, including the
        policy's "Note access denied" warnings, carries request_id,
        frontend, method, path and source="web".

        The ID is also available to handlers as request.state.request_id
        and is copied into every response envelope's metadata.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process request with context tracking.

        Args:
            request: Incoming request
            call_next: Next handler in the ASGI chain

        Returns:
            The handler's response with X-Request-ID and X-Response-Time set
        """
        # Propagate the caller's ID so client and server logs line up
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        frontend = request.headers.get("X-Frontend-ID", "unknown").lower()
        if frontend not in KNOWN_FRONTENDS:
            frontend = "unknown"

        # Timezone-naive UTC, like the model timestamps
        start_time = datetime.now(timezone.utc).replace(tzinfo=None)

        request.state.request_id = request_id
        request.state.frontend = frontend
        request.state.start_time = start_time

        # Start from a clean context; the worker may have served another request
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            method=request.method,
            path=request.url.path,
            source="web",
        )

        logger.debug(
            "Request started",
            extra={
                "client_host": request.client.host if request.client else None,
                "user_agent": request.headers.get("User-Agent"),
            },
        )

        try:
            response = await call_next(request)

            end_time = datetime.now(timezone.utc).replace(tzinfo=None)
            duration_ms = int((end_time - start_time).total_seconds() * 1000)

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"

            logger.debug(
                "Request completed",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )

            return response

        except Exception as exc:
            end_time = datetime.now(timezone.utc).replace(tzinfo=None)
            duration_ms = int((end_time - start_time).total_seconds() * 1000)

            # The exception handlers build the response
            logger.error(
                "Request failed with exception",
                extra={
                    "duration_ms": duration_ms,
                    "error_type": type(exc).__name__,
                },
            )
            raise

        finally:
            # Context must not leak into the next request on this worker
            structlog.contextvars.clear_contextvars()
