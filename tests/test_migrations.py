"""Alembic migration tests — the revision chain builds and tears down the schema."""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from tasktrack.config import get_settings

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


@pytest.fixture
def alembic_cfg(tmp_path, monkeypatch):
    db_file = tmp_path / "migrated.db"
    monkeypatch.setenv("TASKTRACK_DATABASE_URL", f"sqlite+aiosqlite:///{db_file}")
    get_settings.cache_clear()
    yield Config(str(ALEMBIC_INI)), f"sqlite:///{db_file}"
    get_settings.cache_clear()


def _tables(sync_url):
    engine = create_engine(sync_url)
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_upgrade_creates_schema(alembic_cfg):
    cfg, sync_url = alembic_cfg
    command.upgrade(cfg, "head")

    assert {"users", "tasks"} <= _tables(sync_url)

    engine = create_engine(sync_url)
    try:
        indexes = {ix["name"] for ix in inspect(engine).get_indexes("tasks")}
    finally:
        engine.dispose()
    assert "ix_tasks_user_id" in indexes


def test_downgrade_drops_schema(alembic_cfg):
    cfg, sync_url = alembic_cfg
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    assert not {"users", "tasks"} & _tables(sync_url)
