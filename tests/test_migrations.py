# tests/test_migrations.py
"""Tests for schema migrations and database bootstrap helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

from agora.db.session import Base
from agora.scripts.ensure_db import ensure_database, split_admin_url, sqlite_path, to_libpq_url
from agora.scripts.migrate import run_upgrade


def test_upgrade_head_matches_models(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"

    run_upgrade("head", url)

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert set(Base.metadata.tables) <= tables
    assert "alembic_version" in tables


class TestEnsureDb:
    """URL helpers used before the first migration."""

    def test_driver_suffix_is_stripped(self) -> None:
        url = to_libpq_url("postgresql+psycopg://forum:secret@db:5432/agora")

        assert url == "postgresql://forum:secret@db:5432/agora"

    def test_admin_url_targets_maintenance_db(self) -> None:
        admin_url, target = split_admin_url("'postgresql+psycopg://forum@db/agora?sslmode=require'")

        assert admin_url == "postgresql://forum@db/postgres?sslmode=require"
        assert target == "agora"

    @pytest.mark.parametrize("url", ["", "mysql://db/agora"])
    def test_rejects_non_postgres(self, url: str) -> None:
        with pytest.raises(ValueError):
            to_libpq_url(url)

    def test_sqlite_parent_directory_is_created(self, tmp_path: Path) -> None:
        db_file = tmp_path / "nested" / "forum.db"

        ensure_database(f"sqlite:///{db_file}")

        assert db_file.parent.is_dir()

    def test_in_memory_sqlite_has_no_path(self) -> None:
        assert sqlite_path("sqlite://") is None
        assert sqlite_path("sqlite:///:memory:") is None
