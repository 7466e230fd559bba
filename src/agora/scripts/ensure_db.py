# src/agora/scripts/ensure_db.py
"""Create the configured database before the first migration runs.

Postgres databases are created through the ``postgres`` maintenance
database; SQLite only needs its parent directory to exist.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

import psycopg
from psycopg import sql
from sqlalchemy.engine import make_url

from agora.core.settings import settings


def to_libpq_url(uri: str) -> str:
    """Strip SQLAlchemy driver suffixes (``postgresql+psycopg``) so libpq accepts the URL."""
    uri = (uri or "").strip().strip("'\"")
    if not uri:
        raise ValueError("DATABASE_URL is empty")
    parts = urlsplit(uri)
    if not parts.scheme.startswith("postgresql"):
        raise ValueError(f"Not a Postgres URL: {uri!r}")
    return urlunsplit(("postgresql", parts.netloc, parts.path, parts.query, parts.fragment))


def split_admin_url(db_url: str) -> tuple[str, str]:
    """Return ``(maintenance_url, target_db)`` for a Postgres URL."""
    parts = urlsplit(to_libpq_url(db_url))
    target_db = parts.path.lstrip("/") or "postgres"
    admin_url = urlunsplit(("postgresql", parts.netloc, "/postgres", parts.query, ""))
    return admin_url, target_db


def sqlite_path(db_url: str) -> Path | None:
    """Return the file behind a SQLite URL, or None for in-memory databases."""
    database = make_url(db_url).database
    if not database or database == ":memory:":
        return None
    return Path(database)


def ensure_postgres_database(db_url: str) -> bool:
    """Create the Postgres database if it is missing; True when it was created."""
    admin_url, target_db = split_admin_url(db_url)
    with psycopg.connect(admin_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (target_db,))
        if cur.fetchone() is not None:
            print(f"[ensure_db] database {target_db} already exists")
            return False
        cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target_db)))
    print(f"[ensure_db] created database {target_db}")
    return True


def ensure_database(db_url: str) -> None:
    if db_url.startswith("sqlite"):
        path = sqlite_path(db_url)
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            print(f"[ensure_db] sqlite database at {path}")
        return
    ensure_postgres_database(db_url)


def main() -> None:
    parser = argparse.ArgumentParser(description="Ensure the configured database exists")
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to effective settings URL)",
    )
    args = parser.parse_args()

    try:
        ensure_database(args.url or settings.effective_database_url)
    except (ValueError, psycopg.Error) as exc:
        print(f"[ensure_db] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
