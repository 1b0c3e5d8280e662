"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything process-wide (settings, engine, session factory,
token service) is built here ONCE and stored on app.state; request
handlers reach it through dependencies, never through module globals.
Lifespan manages the parts that need I/O (schema, Redis).
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasktrack import __version__
from tasktrack.api import api_router
from tasktrack.api.health import router as health_router
from tasktrack.auth.jwt import TokenService
from tasktrack.config import Settings, get_settings
from tasktrack.db.engine import build_engine, build_session_factory, create_schema
from tasktrack.errors import register_exception_handlers
from tasktrack.logging_config import configure_logging
from tasktrack.middleware.access_log import AccessLogMiddleware
from tasktrack.middleware.rate_limit import RateLimitMiddleware
from tasktrack.middleware.request_id import RequestIdMiddleware
from tasktrack.middleware.security import SecurityHeadersMiddleware
from tasktrack.middleware.unhandled_error import UnhandledErrorMiddleware

logger = structlog.get_logger()


async def _connect_redis(url: str):
    from redis.asyncio import from_url

    client = from_url(url)
    await client.ping()
    return client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "tasktrack.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    if not settings.jwt_secret:
        # Allowed in development only; first token operation will fail
        logger.warning("tasktrack.signing_key_missing")

    if settings.auto_create_schema:
        await create_schema(app.state.engine)
        logger.info("tasktrack.schema_ready")

    if settings.redis_url:
        try:
            app.state.redis = await _connect_redis(settings.redis_url)
            logger.info("tasktrack.redis_connected")
        except Exception as e:
            logger.warning("tasktrack.redis_unavailable", error=str(e))
            # Redis is optional; only rate limiting depends on it

    yield

    logger.info("tasktrack.shutdown")

    if app.state.redis is not None:
        await app.state.redis.aclose()
        app.state.redis = None

    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="TaskTrack API",
        description="Per-user task management behind JWT bearer authentication",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Process-wide state ────────────────────────────────
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_service = TokenService.from_settings(settings)
    app.state.redis = None

    register_exception_handlers(app)

    # ── Middleware stack ──────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → AccessLog → Security → RateLimit
    #   → UnhandledError → handler
    # CORS stays outermost: preflights never reach the rate limiter and
    # 429s carry Access-Control-Allow-Origin.

    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: tasktrack.main:app)
app = create_app()
