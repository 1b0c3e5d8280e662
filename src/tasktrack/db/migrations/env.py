"""Alembic environment for the users/tasks schema.

Learn: The database URL comes from TASKTRACK_DATABASE_URL (via Settings),
not from alembic.ini, so migrations always hit the same database the API
serves. A one-off target can be given on the command line:

    alembic -x database_url=postgresql+asyncpg://... upgrade head

SQLite cannot ALTER most column properties in place, so on SQLite
autogenerated migrations are rendered in batch mode (copy-and-move).
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from tasktrack.config import get_settings
from tasktrack.db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get(
        "database_url", get_settings().database_url
    )


def _configure(on_sqlite: bool, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=on_sqlite,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    url = _database_url()
    _configure(
        url.startswith("sqlite"),
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection) -> None:
    _configure(connection.dialect.name == "sqlite", connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
