# src/agora/api/v1/endpoints/posts.py
"""Post and comment endpoints for the Agora API."""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.orm import Session

from agora.api.v1.dependencies import (
    CurrentUserIdDep,
    OptionalUserIdDep,
    SessionDep,
    SessionFactoryDep,
)
from agora.core.settings import settings
from agora.db.session import store_errors
from agora.repositories.post_repo import PostRepository, normalize_categories, publish_post
from agora.repositories.records import PostFilter, PostView
from agora.schemas.post import (
    CommentCreate,
    CommentResponse,
    PostCreate,
    PostDetailResponse,
    PostResponse,
)

router = APIRouter(prefix="/posts", tags=["posts"])
logger = logging.getLogger(__name__)


def _get_post_or_404(db: Session, post_id: int) -> PostView:
    with store_errors():
        post = PostRepository(db).get_post(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def _list(db: Session, post_filter: PostFilter) -> list[PostResponse]:
    with store_errors():
        posts = PostRepository(db).list_posts(post_filter)
    return [PostResponse.model_validate(post) for post in posts]


@router.get("/", response_model=list[PostResponse])
def list_posts(
    db: SessionDep,
    user_id: OptionalUserIdDep,
    category: Annotated[list[str] | None, Query(description="Filter by category name")] = None,
    mine: Annotated[bool, Query(description="Only the caller's posts")] = False,
    liked: Annotated[bool, Query(description="Only posts the caller liked")] = False,
) -> list[PostResponse]:
    """List posts newest first.

    ``mine`` and ``liked`` only apply to signed-in callers and are ignored
    for guests.
    """
    post_filter = PostFilter(
        categories=tuple(normalize_categories(category or [])),
        author_id=user_id if mine and user_id is not None else None,
        liked_by_user_id=user_id if liked and user_id is not None else None,
        limit=settings.post_list_limit,
    )
    return _list(db, post_filter)


@router.get("/mine", response_model=list[PostResponse])
def list_my_posts(db: SessionDep, user_id: CurrentUserIdDep) -> list[PostResponse]:
    """List the caller's own posts."""
    return _list(db, PostFilter(author_id=user_id, limit=settings.post_list_limit))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=PostDetailResponse)
def create_post(
    post_data: PostCreate,
    db: SessionDep,
    session_factory: SessionFactoryDep,
    user_id: CurrentUserIdDep,
) -> PostDetailResponse:
    """Publish a post under the caller's account."""
    post_id = publish_post(
        session_factory,
        author_id=user_id,
        title=post_data.title,
        content=post_data.content,
        categories=normalize_categories(post_data.categories),
    )
    logger.info("User %s created post %s", user_id, post_id)
    return PostDetailResponse.model_validate(_get_post_or_404(db, post_id))


@router.get("/{post_id}", response_model=PostDetailResponse)
def get_post(post_id: int, db: SessionDep) -> PostDetailResponse:
    """Return one post with its comments, oldest first."""
    return PostDetailResponse.model_validate(_get_post_or_404(db, post_id))


@router.post(
    "/{post_id}/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=CommentResponse,
)
def create_comment(
    post_id: int,
    comment_data: CommentCreate,
    db: SessionDep,
    user_id: CurrentUserIdDep,
) -> CommentResponse:
    """Comment on an existing post."""
    repo = PostRepository(db)
    with store_errors():
        if not repo.post_exists(post_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
        comment = repo.create_comment(
            post_id=post_id,
            author_id=user_id,
            content=comment_data.content,
        )
        db.commit()
        comment_id = comment.id
        views = repo.list_comments(post_id)
    view = next(view for view in views if view.id == comment_id)
    return CommentResponse.model_validate(view)
