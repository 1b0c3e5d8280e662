"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The engine is built once by create_app() from Settings and stored on
app.state; get_db() pulls the session factory from there, so nothing in
the request path touches a module-level global.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tasktrack.config import Settings
from tasktrack.db.models import Base


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the process-wide engine.

    Postgres gets a sized connection pool (min 5, max 20).
    SQLite keeps SQLAlchemy's default pool for its driver.
    """
    kwargs = {"echo": settings.debug}
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(pool_size=5, max_overflow=15, pool_pre_ping=True)
    return create_async_engine(settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory — each request gets its own session."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create missing tables (idempotent). Migrations live in db/migrations."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
