"""Database engine, session factory and transaction helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from agora.core.errors import TransientStoreError
from agora.core.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import agora.models  # noqa: E402,F401


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, *, timeout: float, echo: bool = False) -> Engine:
    """Create an engine whose store calls give up after ``timeout`` seconds.

    SQLite waits on its busy handler for at most ``timeout`` before raising
    "database is locked"; Postgres aborts statements via ``statement_timeout``.
    """
    kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": timeout}
    else:
        kwargs["pool_timeout"] = timeout
        if url.startswith("postgresql"):
            kwargs["connect_args"] = {
                "options": f"-c statement_timeout={int(timeout * 1000)}",
                "connect_timeout": max(1, int(timeout)),
            }
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


engine = build_engine(
    settings.effective_database_url,
    timeout=settings.store_timeout_seconds,
    echo=settings.sql_debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_session_factory() -> sessionmaker[Session]:
    """Return the process-wide session factory (overridden in tests)."""
    return SessionLocal


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate lock timeouts and lost connections into ``TransientStoreError``."""
    try:
        yield
    except (OperationalError, DisconnectionError, PoolTimeoutError) as err:
        logger.warning("Store call failed: %s", err)
        raise TransientStoreError() from err


@contextmanager
def read_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Yield a short-lived session for read-only store calls."""
    with store_errors(), session_factory() as db:
        yield db


@contextmanager
def write_transaction(
    session_factory: sessionmaker[Session],
    *,
    lock_user_id: int | None = None,
) -> Iterator[Session]:
    """Run a read-modify-write unit that no concurrent writer can interleave with.

    On SQLite the transaction is opened with ``BEGIN IMMEDIATE`` so the
    database write lock is taken before the first read. Other backends lock
    the row of ``lock_user_id`` in ``users``, serialising units per user.
    Commits on success, rolls back on any exception.
    """
    with store_errors(), session_factory() as db:
        with db.begin():
            connection = db.connection()
            if connection.dialect.name == "sqlite":
                connection.exec_driver_sql("BEGIN IMMEDIATE")
            elif lock_user_id is not None:
                db.execute(
                    text("SELECT id FROM users WHERE id = :user_id FOR UPDATE"),
                    {"user_id": lock_user_id},
                )
            yield db


def create_tables(bind: Engine | None = None) -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind: Engine | None = None) -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=bind or engine)
