# tests/services/test_reaction_ledger.py
"""Tests for like/dislike toggling and counting."""

from __future__ import annotations

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest

from agora.core.errors import InvalidTarget, InvalidValue
from agora.models.reaction import DISLIKE, LIKE, TARGET_COMMENT, TARGET_POST
from agora.repositories import ReactionCounts, ReactionKey
from agora.services import ReactionAction
from agora.services.reactions import decide_toggle


@pytest.mark.parametrize(
    ("stored", "requested", "expected"),
    [
        (None, LIKE, LIKE),
        (None, DISLIKE, DISLIKE),
        (LIKE, LIKE, None),
        (DISLIKE, DISLIKE, None),
        (LIKE, DISLIKE, DISLIKE),
        (DISLIKE, LIKE, LIKE),
    ],
)
def test_decide_toggle_table(stored, requested, expected) -> None:
    assert decide_toggle(stored, requested) == expected


class TestSetReaction:
    """Toggle semantics of the ledger against both stores."""

    def test_first_reaction_is_added(self, ledger, test_user) -> None:
        outcome = ledger.set_reaction(test_user.id, TARGET_POST, 1, LIKE)

        assert outcome.action is ReactionAction.ADDED
        assert (outcome.previous, outcome.current) == (None, LIKE)
        assert ledger.reaction_of(test_user.id, TARGET_POST, 1) == LIKE

    def test_same_reaction_twice_clears_it(self, ledger, reaction_store, test_user) -> None:
        ledger.set_reaction(test_user.id, TARGET_POST, 1, LIKE)
        outcome = ledger.set_reaction(test_user.id, TARGET_POST, 1, LIKE)

        assert outcome.action is ReactionAction.REMOVED
        assert reaction_store.get(ReactionKey(test_user.id, TARGET_POST, 1)) is None
        assert ledger.count_reactions(TARGET_POST, 1) == ReactionCounts(0, 0)

    def test_third_toggle_sets_it_again(self, ledger, test_user) -> None:
        for _ in range(3):
            ledger.set_reaction(test_user.id, TARGET_COMMENT, 7, DISLIKE)

        assert ledger.reaction_of(test_user.id, TARGET_COMMENT, 7) == DISLIKE

    def test_opposite_reaction_switches(self, ledger, test_user) -> None:
        ledger.set_reaction(test_user.id, TARGET_POST, 1, LIKE)
        outcome = ledger.set_reaction(test_user.id, TARGET_POST, 1, DISLIKE)

        assert outcome.action is ReactionAction.SWITCHED
        assert (outcome.previous, outcome.current) == (LIKE, DISLIKE)
        assert ledger.count_reactions(TARGET_POST, 1) == ReactionCounts(likes=0, dislikes=1)

    def test_posts_and_comments_are_separate_targets(self, ledger, test_user) -> None:
        ledger.set_reaction(test_user.id, TARGET_POST, 3, LIKE)
        ledger.set_reaction(test_user.id, TARGET_COMMENT, 3, DISLIKE)

        assert ledger.count_reactions(TARGET_POST, 3) == ReactionCounts(1, 0)
        assert ledger.count_reactions(TARGET_COMMENT, 3) == ReactionCounts(0, 1)

    def test_many_users_liking_one_post(self, ledger, make_user) -> None:
        users = [make_user(f"fan{i}") for i in range(5)]
        for user in users:
            ledger.set_reaction(user.id, TARGET_POST, 42, LIKE)

        assert ledger.count_reactions(TARGET_POST, 42) == ReactionCounts(likes=5, dislikes=0)

    def test_concurrent_identical_toggles(self, ledger, test_user) -> None:
        """Serialized toggles alternate add/remove; an even number leaves nothing behind."""
        workers = 6
        barrier = threading.Barrier(workers)

        def toggle(_: int) -> ReactionAction:
            barrier.wait()
            return ledger.set_reaction(test_user.id, TARGET_POST, 9, LIKE).action

        with ThreadPoolExecutor(max_workers=workers) as pool:
            actions = Counter(pool.map(toggle, range(workers)))

        assert actions == {ReactionAction.ADDED: 3, ReactionAction.REMOVED: 3}
        assert ledger.reaction_of(test_user.id, TARGET_POST, 9) is None
        assert ledger.count_reactions(TARGET_POST, 9) == ReactionCounts(0, 0)


class TestValidation:
    """Malformed requests never reach the store."""

    @pytest.mark.parametrize("target_type", ["thread", "", "POST"])
    def test_unknown_target_type(self, ledger, test_user, target_type) -> None:
        with pytest.raises(InvalidTarget):
            ledger.set_reaction(test_user.id, target_type, 1, LIKE)

    @pytest.mark.parametrize("value", [0, 2, -2, True])
    def test_value_must_be_plus_or_minus_one(self, ledger, test_user, value) -> None:
        with pytest.raises(InvalidValue):
            ledger.set_reaction(test_user.id, TARGET_POST, 1, value)

        assert ledger.count_reactions(TARGET_POST, 1) == ReactionCounts(0, 0)

    def test_target_is_checked_before_value(self, ledger, test_user) -> None:
        with pytest.raises(InvalidTarget):
            ledger.set_reaction(test_user.id, "thread", 1, 5)

    def test_counting_unknown_target_type(self, ledger) -> None:
        with pytest.raises(InvalidTarget):
            ledger.count_reactions("thread", 1)
