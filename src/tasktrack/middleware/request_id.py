"""Request ID middleware: tag each request for log correlation.

Learn: A caller-supplied X-Request-ID is reused only if it looks like an
ID (short, URL-safe characters). Anything else is replaced, so a client
cannot inject newlines or megabytes of text into every log line of the
request. The ID, method and path are bound into structlog's contextvars
and the ID is echoed back in the response.
"""

import re
import uuid
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._\-]{1,128}")


def resolve_request_id(incoming: Optional[str]) -> str:
    if incoming and _VALID_REQUEST_ID.fullmatch(incoming):
        return incoming
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
