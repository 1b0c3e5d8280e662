"""
Shared helpers for TaskTrack examples.

Handles the health check and authentication (register + login) so each
example can focus on its own workflow.
"""

import sys
import uuid

import httpx

HOST = "http://localhost:5001"
BASE = f"{HOST}/api"


def check_backend() -> None:
    """Verify the backend is reachable and its database is connected."""
    try:
        resp = httpx.get(f"{HOST}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {HOST}")
        print("Start it with:  tasktrack serve --reload")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Database: {'✓' if health['database'] == 'connected' else '✗'}")

    if health["database"] != "connected":
        print("\nERROR: Database is not connected. Check TASKTRACK_DATABASE_URL.")
        sys.exit(1)


def authenticate() -> tuple[str, dict]:
    """Register a fresh user and log in, returning (token, user).

    Uses a unique username and email per run so examples are repeatable.
    """
    run_id = uuid.uuid4().hex[:8]
    username = f"demo{run_id}"
    email = f"demo-{run_id}@example.com"
    password = "demo-password-123"

    resp = httpx.post(
        f"{BASE}/auth/register",
        json={"username": username, "email": email, "password": password},
        timeout=10,
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    resp = httpx.post(
        f"{BASE}/auth/login",
        json={"email": email, "password": password},
        timeout=10,
    )
    if resp.status_code != 200:
        print(f"ERROR: Login failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    body = resp.json()
    return body["token"], body["user"]


def create_client() -> httpx.Client:
    """Check backend, authenticate, and return an httpx Client with auth headers."""
    check_backend()
    token, user = authenticate()
    print(f"  Auth:     ✓ (JWT for {user['username']})")
    return httpx.Client(
        base_url=BASE,
        timeout=10,
        headers={"Authorization": f"Bearer {token}"},
    )
