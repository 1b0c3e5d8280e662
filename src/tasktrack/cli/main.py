"""TaskTrack CLI — run the API server and manage the database schema.

Usage:
    tasktrack serve                      # Run the API with uvicorn
    tasktrack serve --port 8080 --reload # Dev server with auto-reload
    tasktrack init-db                    # Create tables (idempotent)
    tasktrack check-config               # Validate settings, print a summary
"""

from __future__ import annotations

import asyncio

import click
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from tasktrack.config import get_settings


@click.group()
@click.version_option(package_name="tasktrack")
def cli():
    """TaskTrack — per-user task management API."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: TASKTRACK_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: TASKTRACK_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host, port, reload):
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tasktrack.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command("init-db")
def init_db():
    """Create all tables in TASKTRACK_DATABASE_URL."""
    from tasktrack.db.engine import build_engine, create_schema

    settings = get_settings()

    async def _create():
        engine = build_engine(settings)
        try:
            await create_schema(engine)
        finally:
            await engine.dispose()

    asyncio.run(_create())
    click.echo(f"Schema ready: {_redact(settings.database_url)}")


@cli.command("check-config")
def check_config():
    """Load settings and report anything that would break auth."""
    settings = get_settings()
    click.echo(f"environment:  {settings.environment}")
    click.echo(f"database:     {_redact(settings.database_url)}")
    click.echo(f"redis:        {_redact(settings.redis_url) or '(disabled)'}")
    click.echo(f"cors origins: {', '.join(settings.cors_origins)}")
    if not settings.jwt_secret:
        click.echo("jwt secret:   MISSING, token issuance will fail", err=True)
        raise SystemExit(1)
    click.echo("jwt secret:   set")


def _redact(url: str) -> str:
    """Hide the password in a connection URL."""
    if not url:
        return url
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "(unparseable URL)"


if __name__ == "__main__":
    cli()
