"""Reaction ledger: one signed reaction per (user, target) with toggle semantics."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from agora.core.errors import InvalidTarget, InvalidValue
from agora.models.reaction import DISLIKE, LIKE, TARGET_TYPES
from agora.repositories.reaction_repo import ReactionStore
from agora.repositories.records import ReactionCounts, ReactionKey

__all__ = ["ReactionAction", "ReactionOutcome", "ReactionLedger", "decide_toggle"]

logger = logging.getLogger(__name__)


class ReactionAction(str, enum.Enum):
    """What a toggle did to the stored row."""

    ADDED = "added"
    REMOVED = "removed"
    SWITCHED = "switched"


@dataclass(frozen=True)
class ReactionOutcome:
    """Result of :meth:`ReactionLedger.set_reaction`."""

    action: ReactionAction
    previous: int | None
    current: int | None


def decide_toggle(stored: int | None, requested: int) -> int | None:
    """Return the value to store, None meaning "delete the row".

    | stored   | result    |
    |----------|-----------|
    | none     | requested |
    | same     | none      |
    | opposite | requested |
    """
    if stored == requested:
        return None
    return requested


def _validate(target_type: str, value: int) -> None:
    if target_type not in TARGET_TYPES:
        raise InvalidTarget(f"Unknown target type: {target_type!r}")
    if isinstance(value, bool) or value not in (LIKE, DISLIKE):
        raise InvalidValue(f"Reaction value must be 1 or -1, got {value!r}")


class ReactionLedger:
    """Keeps at most one like or dislike per user and target.

    Repeating the same reaction clears it, so two identical calls in a row
    leave no row behind; the opposite reaction replaces the stored one.
    """

    def __init__(self, store: ReactionStore) -> None:
        self._store = store

    def set_reaction(
        self,
        user_id: int,
        target_type: str,
        target_id: int,
        value: int,
    ) -> ReactionOutcome:
        """Toggle ``value`` for ``user_id`` on the target.

        Raises:
            InvalidTarget: If ``target_type`` is neither "post" nor "comment".
            InvalidValue: If ``value`` is not +1 or -1.
        """
        _validate(target_type, value)
        key = ReactionKey(user_id=user_id, target_type=target_type, target_id=target_id)
        previous, current = self._store.apply(
            key, lambda stored: decide_toggle(stored, value)
        )
        if previous is None:
            action = ReactionAction.ADDED
        elif current is None:
            action = ReactionAction.REMOVED
        else:
            action = ReactionAction.SWITCHED
        logger.debug(
            "Reaction %s by user %s on %s %s (%s -> %s)",
            action.value, user_id, target_type, target_id, previous, current,
        )
        return ReactionOutcome(action=action, previous=previous, current=current)

    def count_reactions(self, target_type: str, target_id: int) -> ReactionCounts:
        """Return likes and dislikes for one target."""
        if target_type not in TARGET_TYPES:
            raise InvalidTarget(f"Unknown target type: {target_type!r}")
        return self._store.counts(target_type, target_id)

    def reaction_of(self, user_id: int, target_type: str, target_id: int) -> int | None:
        """Return the caller's current reaction on the target, if any."""
        if target_type not in TARGET_TYPES:
            raise InvalidTarget(f"Unknown target type: {target_type!r}")
        return self._store.get(
            ReactionKey(user_id=user_id, target_type=target_type, target_id=target_id)
        )
