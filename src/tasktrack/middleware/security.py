"""Security headers middleware.

Learn: Every response gets the static hardening headers below. Responses
under /api additionally get `Cache-Control: no-store`: they carry bearer
tokens (register/login) and one user's tasks, and neither may be kept by
a shared cache or the browser's back/forward cache. HSTS is only sent
over HTTPS, where the browser will honor it.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-site",
}
HSTS = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, private_prefix: str = "/api"):
        super().__init__(app)
        self.private_prefix = private_prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(STATIC_HEADERS)
        if request.url.path.startswith(self.private_prefix):
            response.headers["Cache-Control"] = "no-store"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = HSTS
        return response
