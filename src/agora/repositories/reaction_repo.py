"""Storage for like/dislike reactions."""
from __future__ import annotations

import logging
from collections.abc import Callable
from threading import Lock
from typing import Protocol

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from agora.db.session import read_session, write_transaction
from agora.models import Reaction
from agora.models.reaction import DISLIKE, LIKE
from agora.repositories.records import ReactionCounts, ReactionKey

__all__ = ["Decide", "ReactionStore", "SqlReactionStore", "InMemoryReactionStore"]

logger = logging.getLogger(__name__)

# Maps the stored value (None when absent) to the value to store (None deletes).
Decide = Callable[[int | None], int | None]


class ReactionStore(Protocol):
    """Operations the reaction ledger needs from its backing store."""

    def apply(self, key: ReactionKey, decide: Decide) -> tuple[int | None, int | None]:
        """Read the value under ``key``, store ``decide(value)`` and return both.

        The read and the write form one atomic unit per key.
        """

    def get(self, key: ReactionKey) -> int | None:
        """Return the stored value under ``key``."""

    def counts(self, target_type: str, target_id: int) -> ReactionCounts:
        """Return likes and dislikes recorded for one target."""


def reaction_count_columns() -> tuple:
    """Return ``(likes, dislikes)`` aggregate expressions over ``Reaction.value``."""
    likes = func.coalesce(func.sum(case((Reaction.value == LIKE, 1), else_=0)), 0)
    dislikes = func.coalesce(func.sum(case((Reaction.value == DISLIKE, 1), else_=0)), 0)
    return likes, dislikes


class SqlReactionStore:
    """Reaction store backed by the ``reactions`` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def apply(self, key: ReactionKey, decide: Decide) -> tuple[int | None, int | None]:
        try:
            return self._apply_once(key, decide)
        except IntegrityError:
            # A concurrent writer inserted the same key first; decide again
            # against the committed row.
            logger.info(
                "Reaction insert for user %s on %s %s lost a race, retrying",
                key.user_id,
                key.target_type,
                key.target_id,
            )
            return self._apply_once(key, decide)

    def _apply_once(self, key: ReactionKey, decide: Decide) -> tuple[int | None, int | None]:
        with write_transaction(self._session_factory, lock_user_id=key.user_id) as db:
            row = db.get(Reaction, (key.user_id, key.target_type, key.target_id))
            previous = row.value if row is not None else None
            current = decide(previous)
            if current is None:
                if row is not None:
                    db.delete(row)
            elif row is None:
                db.add(
                    Reaction(
                        user_id=key.user_id,
                        target_type=key.target_type,
                        target_id=key.target_id,
                        value=current,
                    )
                )
            else:
                row.value = current
        return previous, current

    def get(self, key: ReactionKey) -> int | None:
        with read_session(self._session_factory) as db:
            row = db.get(Reaction, (key.user_id, key.target_type, key.target_id))
            return row.value if row is not None else None

    def counts(self, target_type: str, target_id: int) -> ReactionCounts:
        likes, dislikes = reaction_count_columns()
        stmt = select(likes, dislikes).where(
            Reaction.target_type == target_type,
            Reaction.target_id == target_id,
        )
        with read_session(self._session_factory) as db:
            row = db.execute(stmt).one()
        return ReactionCounts(likes=int(row[0]), dislikes=int(row[1]))


class InMemoryReactionStore:
    """Process-local reaction store used by unit tests."""

    def __init__(self) -> None:
        self._values: dict[ReactionKey, int] = {}
        self._lock = Lock()

    def apply(self, key: ReactionKey, decide: Decide) -> tuple[int | None, int | None]:
        with self._lock:
            previous = self._values.get(key)
            current = decide(previous)
            if current is None:
                self._values.pop(key, None)
            else:
                self._values[key] = current
            return previous, current

    def get(self, key: ReactionKey) -> int | None:
        with self._lock:
            return self._values.get(key)

    def counts(self, target_type: str, target_id: int) -> ReactionCounts:
        with self._lock:
            values = [
                value
                for key, value in self._values.items()
                if key.target_type == target_type and key.target_id == target_id
            ]
        return ReactionCounts(likes=values.count(LIKE), dislikes=values.count(DISLIKE))
