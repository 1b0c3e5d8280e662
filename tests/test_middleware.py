"""Tests for HTTP middleware — health, headers, request IDs, rate limit, CORS."""

import pytest


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "OK"
    assert data["database"] == "connected"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_api_info(client):
    r = await client.get("/api")
    assert r.status_code == 200
    assert r.json()["message"] == "TaskTrack API is running"
    assert "version" in r.json()


@pytest.mark.asyncio
async def test_security_headers(client):
    r = await client.get("/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_request_id_generated(client):
    r1 = await client.get("/health")
    r2 = await client.get("/health")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/health", headers={"X-Request-ID": "trace-12345"})
    assert r.headers["X-Request-ID"] == "trace-12345"


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", ["x" * 200, "has spaces", "semi;colon"])
async def test_untrusted_request_id_replaced(client, bad_id):
    r = await client.get("/health", headers={"X-Request-ID": bad_id})
    assert r.headers["X-Request-ID"] != bad_id
    assert len(r.headers["X-Request-ID"]) == 32


@pytest.mark.asyncio
async def test_api_responses_are_not_cached(client, register):
    body = await register()
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.headers["Cache-Control"] == "no-store"

    r = await client.get("/health")
    assert "Cache-Control" not in r.headers


# ═══════════════════════════════════════════════════════════
# Rate limiting (with an in-memory stand-in for Redis)
# ═══════════════════════════════════════════════════════════


class FakeRedis:
    """Just the two commands the rate limiter uses."""

    def __init__(self):
        self.counts = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        return True


class BrokenRedis:
    async def incr(self, key):
        raise ConnectionError("redis is down")


@pytest.mark.asyncio
async def test_rate_limit_skipped_without_redis(client):
    r = await client.get("/health")
    assert "X-RateLimit-Limit" not in r.headers


@pytest.mark.asyncio
async def test_rate_limit_enforced(client, app):
    app.state.redis = FakeRedis()
    limit = app.state.settings.rate_limit_requests

    for _ in range(limit):
        r = await client.get("/api")
        assert r.status_code == 200
    assert r.headers["X-RateLimit-Remaining"] == "0"

    r = await client.get("/api")
    assert r.status_code == 429
    assert "Retry-After" in r.headers
    assert "message" in r.json()


@pytest.mark.asyncio
async def test_rate_limited_response_keeps_cors_headers(client, app):
    app.state.redis = FakeRedis()
    origin = {"Origin": "http://localhost:5173"}
    for _ in range(app.state.settings.rate_limit_requests):
        await client.get("/api", headers=origin)

    r = await client.get("/api", headers=origin)
    assert r.status_code == 429
    assert r.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert r.json() == {"message": "Too many requests, please try again later."}


@pytest.mark.asyncio
async def test_preflight_is_not_rate_limited(client, app):
    redis = FakeRedis()
    app.state.redis = redis
    for _ in range(app.state.settings.rate_limit_requests + 5):
        r = await client.options(
            "/api/tasks",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert r.status_code == 200
    assert redis.counts == {}


@pytest.mark.asyncio
async def test_rate_limit_fails_open(client, app):
    app.state.redis = BrokenRedis()
    r = await client.get("/api")
    assert r.status_code == 200


# ═══════════════════════════════════════════════════════════
# CORS
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_cors_allowed_origin(client):
    r = await client.options(
        "/api/tasks",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert r.headers["access-control-allow-credentials"] == "true"


@pytest.mark.asyncio
async def test_cors_unknown_origin(client):
    r = await client.options(
        "/api/tasks",
        headers={
            "Origin": "https://evil.example.com",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert "access-control-allow-origin" not in r.headers
