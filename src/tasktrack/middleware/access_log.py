"""Access log middleware — one structured log line per request.

Learn: Runs inside RequestIdMiddleware, so every "http.request" entry
carries the request_id. Query strings are left out of the log because
they're user-controlled; headers are never logged (they carry tokens).
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        response: Response = await call_next(request)
        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            client=request.client.host if request.client else None,
        )
        return response
