"""Test fixtures — a fresh in-memory database and app per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app with create_app(test_settings), so no
   state leaks between tests through app.state.
2. The engine points at in-memory SQLite with StaticPool — every session
   shares the one connection, so data committed by one request is
   visible to the next, and the whole database vanishes afterwards.
3. httpx's ASGITransport drives the app in-process. The real auth
   pipeline runs: tests register users and send real bearer tokens.
"""

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from tasktrack.config import Settings
from tasktrack.db.engine import build_session_factory, create_schema
from tasktrack.main import create_app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-secret"
DEFAULT_PASSWORD = "password"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": TEST_DB_URL,
        "jwt_secret": TEST_JWT_SECRET,
        "bcrypt_rounds": 4,  # bcrypt's minimum cost
        "auto_create_schema": False,
        "environment": "development",
        "redis_url": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest_asyncio.fixture()
async def settings():
    return make_settings()


@pytest_asyncio.fixture()
async def app(settings):
    """App with its engine swapped for a shared in-memory SQLite database."""
    application = create_app(settings)
    await application.state.engine.dispose()

    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)
    await create_schema(engine)
    application.state.engine = engine
    application.state.session_factory = build_session_factory(engine)

    yield application

    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(app):
    """A session on the same database the app uses."""
    async with app.state.session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client driving the app in-process.

    raise_app_exceptions=False lets tests observe the 500 the error
    handler renders instead of the exception Starlette re-raises.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def register(client):
    """Register a user through the API; returns the response body."""

    async def _register(username=None, email=None, password=DEFAULT_PASSWORD):
        suffix = uuid.uuid4().hex[:8]
        r = await client.post(
            "/api/auth/register",
            json={
                "username": username or f"user{suffix}",
                "email": email or f"user-{suffix}@example.com",
                "password": password,
            },
        )
        assert r.status_code == 201, r.text
        return r.json()

    return _register


@pytest_asyncio.fixture()
async def auth_headers(register):
    """Bearer headers for a freshly registered user."""
    body = await register()
    return {"Authorization": f"Bearer {body['token']}"}
