"""Storage for login sessions."""
from __future__ import annotations

import datetime
from dataclasses import replace
from threading import Lock
from typing import Protocol

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, sessionmaker

from agora.db.session import read_session, write_transaction
from agora.models import AuthSession
from agora.repositories.records import SessionRecord

__all__ = ["SessionStore", "SqlSessionStore", "InMemorySessionStore"]


class SessionStore(Protocol):
    """Operations the session manager needs from its backing store."""

    def replace_for_user(self, record: SessionRecord) -> None:
        """Delete every session of ``record.user_id`` and insert ``record``, atomically."""

    def get(self, token: str) -> SessionRecord | None:
        """Return the stored session for ``token``, expired or not."""

    def delete(self, token: str) -> None:
        """Remove the session for ``token`` if present."""

    def delete_for_user(self, user_id: int) -> int:
        """Remove every session of ``user_id`` and return how many were removed."""

    def extend(self, token: str, expires_at: datetime.datetime) -> bool:
        """Move the expiry of ``token``; False when the row no longer exists."""

    def count_for_user(self, user_id: int) -> int:
        """Return the number of stored sessions of ``user_id``."""


class SqlSessionStore:
    """Session store backed by the ``sessions`` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def replace_for_user(self, record: SessionRecord) -> None:
        with write_transaction(self._session_factory, lock_user_id=record.user_id) as db:
            db.execute(delete(AuthSession).where(AuthSession.user_id == record.user_id))
            db.add(record.to_row())

    def get(self, token: str) -> SessionRecord | None:
        with read_session(self._session_factory) as db:
            row = db.get(AuthSession, token)
            return SessionRecord.from_row(row) if row is not None else None

    def delete(self, token: str) -> None:
        with write_transaction(self._session_factory) as db:
            db.execute(delete(AuthSession).where(AuthSession.token == token))

    def delete_for_user(self, user_id: int) -> int:
        with write_transaction(self._session_factory, lock_user_id=user_id) as db:
            result = db.execute(delete(AuthSession).where(AuthSession.user_id == user_id))
            return result.rowcount or 0

    def extend(self, token: str, expires_at: datetime.datetime) -> bool:
        with write_transaction(self._session_factory) as db:
            result = db.execute(
                update(AuthSession)
                .where(AuthSession.token == token)
                .values(expires_at=expires_at)
            )
            return bool(result.rowcount)

    def count_for_user(self, user_id: int) -> int:
        with read_session(self._session_factory) as db:
            stmt = select(func.count()).select_from(AuthSession).where(
                AuthSession.user_id == user_id
            )
            return int(db.execute(stmt).scalar_one())


class InMemorySessionStore:
    """Process-local session store used by unit tests and throwaway instances."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = Lock()

    def replace_for_user(self, record: SessionRecord) -> None:
        with self._lock:
            stale = [t for t, s in self._sessions.items() if s.user_id == record.user_id]
            for token in stale:
                del self._sessions[token]
            self._sessions[record.token] = record

    def get(self, token: str) -> SessionRecord | None:
        with self._lock:
            return self._sessions.get(token)

    def delete(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def delete_for_user(self, user_id: int) -> int:
        with self._lock:
            stale = [t for t, s in self._sessions.items() if s.user_id == user_id]
            for token in stale:
                del self._sessions[token]
            return len(stale)

    def extend(self, token: str, expires_at: datetime.datetime) -> bool:
        with self._lock:
            record = self._sessions.get(token)
            if record is None:
                return False
            self._sessions[token] = replace(record, expires_at=expires_at)
            return True

    def count_for_user(self, user_id: int) -> int:
        with self._lock:
            return sum(1 for s in self._sessions.values() if s.user_id == user_id)
