# src/agora/api/v1/endpoints/reactions.py
"""Like/dislike endpoints for the Agora API."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import Session

from agora.api.v1.dependencies import (
    CurrentUserIdDep,
    OptionalUserIdDep,
    ReactionLedgerDep,
    SessionDep,
)
from agora.core.errors import InvalidTarget, InvalidValue
from agora.db.session import store_errors
from agora.models.reaction import TARGET_COMMENT, TARGET_POST
from agora.repositories.post_repo import PostRepository
from agora.schemas.reaction import ReactionCreate, ReactionResponse, ReactionSummary

router = APIRouter(prefix="/reactions", tags=["reactions"])


def _ensure_target_exists(db: Session, target_type: str, target_id: int) -> None:
    """Answer 404 for a post or comment that does not exist.

    Unknown target types are left for the ledger to reject.
    """
    repo = PostRepository(db)
    with store_errors():
        if target_type == TARGET_POST:
            found = repo.post_exists(target_id)
        elif target_type == TARGET_COMMENT:
            found = repo.comment_post_id(target_id) is not None
        else:
            return
    if not found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{target_type.capitalize()} not found",
        )


@router.post("/", response_model=ReactionResponse)
def toggle_reaction(
    reaction_data: ReactionCreate,
    db: SessionDep,
    user_id: CurrentUserIdDep,
    ledger: ReactionLedgerDep,
) -> ReactionResponse:
    """Like or dislike a post or comment.

    Sending the same value again clears it; the opposite value replaces it.
    """
    _ensure_target_exists(db, reaction_data.target_type, reaction_data.target_id)
    # Release the read connection before the ledger opens its own write transaction.
    db.close()
    try:
        outcome = ledger.set_reaction(
            user_id,
            reaction_data.target_type,
            reaction_data.target_id,
            reaction_data.value,
        )
        counts = ledger.count_reactions(reaction_data.target_type, reaction_data.target_id)
    except (InvalidTarget, InvalidValue) as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=err.message,
        ) from err
    return ReactionResponse(
        action=outcome.action.value,
        value=outcome.current or 0,
        likes=counts.likes,
        dislikes=counts.dislikes,
    )


@router.get("/{target_type}/{target_id}", response_model=ReactionSummary)
def get_reaction_summary(
    target_type: str,
    target_id: int,
    user_id: OptionalUserIdDep,
    ledger: ReactionLedgerDep,
) -> ReactionSummary:
    """Return like/dislike counts and the caller's own reaction."""
    target_type = target_type.strip().lower()
    try:
        counts = ledger.count_reactions(target_type, target_id)
        mine = ledger.reaction_of(user_id, target_type, target_id) if user_id is not None else None
    except InvalidTarget as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=err.message,
        ) from err
    return ReactionSummary(
        target_type=target_type,
        target_id=target_id,
        likes=counts.likes,
        dislikes=counts.dislikes,
        my_reaction=mine or 0,
    )
