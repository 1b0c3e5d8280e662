"""Unhandled error middleware — turns escaped exceptions into the 500 body.

Learn: Starlette runs an `Exception` handler in ServerErrorMiddleware,
which sits OUTSIDE every user middleware. An error rendered there skips
the request ID, the security headers and the access log. Registered
innermost, this middleware renders the same generic 500 first, so the
outer layers still decorate and log the response.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tasktrack.errors import unexpected_error_handler


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Catch anything the routes and exception handlers let through."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unexpected_error_handler(request, exc)
