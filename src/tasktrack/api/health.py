"""Health check and API info endpoints.

Learn: /health answers even when the database is down — it reports
"disconnected" instead of failing, so load balancers can tell a
degraded process from a dead one.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from sqlalchemy import text

from tasktrack import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and database connectivity."""
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        database = "connected"
    except Exception:
        database = "disconnected"

    return {
        "status": "OK",
        "message": "TaskTrack API is running",
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/api")
async def api_info():
    return {"message": "TaskTrack API is running", "version": __version__}
