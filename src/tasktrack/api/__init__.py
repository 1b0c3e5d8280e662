"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects every task route without touching
individual handlers, and it runs BEFORE body/path validation, so an
unauthenticated request gets 401/403 rather than a validation error.
The auth router is open except /auth/me, which depends on the gate itself.
/health and /api live outside the prefix and are mounted directly by main.py.
"""

from fastapi import APIRouter, Depends

from tasktrack.api.auth import router as auth_router
from tasktrack.api.tasks import router as tasks_router
from tasktrack.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes: no auth required
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: require a valid bearer token
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
