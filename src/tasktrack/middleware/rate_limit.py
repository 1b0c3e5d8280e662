"""Rate limiting middleware — Redis-based fixed window.

Learn: Each client IP gets a counter key like
"tasktrack:rl:{ip}:{window}" that expires with its window
(default: 100 requests per 15 minutes).

Gracefully skips rate limiting if Redis isn't configured or is
unavailable (e.g., in tests) — a Redis outage must not take the API down.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = structlog.get_logger()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per window."""

    def __init__(self, app, max_requests: int = 100, window_seconds: int = 900):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next) -> Response:
        redis = getattr(request.app.state, "redis", None)
        if redis is None:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time() // self.window_seconds)
        key = f"tasktrack:rl:{client_ip}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, self.window_seconds * 2)
        except Exception as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > self.max_requests:
            retry_after = self.window_seconds - int(time.time() % self.window_seconds)
            return JSONResponse(
                status_code=429,
                content={"message": "Too many requests, please try again later."},
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.max_requests - count))
        return response
