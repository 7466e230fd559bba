"""Data access helpers for working with posts, comments and categories."""
from __future__ import annotations

import logging

from sqlalchemy import Select, and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from agora.db.session import write_transaction
from agora.db.time import as_utc
from agora.models import Category, Comment, Post, PostCategory, Reaction, User
from agora.models.reaction import LIKE, TARGET_COMMENT, TARGET_POST
from agora.repositories.reaction_repo import reaction_count_columns
from agora.repositories.records import CommentView, PostFilter, PostView

__all__ = ["PostRepository", "normalize_categories", "publish_post"]

logger = logging.getLogger(__name__)


def normalize_categories(names: list[str]) -> list[str]:
    """Trim names, drop blanks and duplicates, keep first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        name = name.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return out


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _posts_with_counts(self) -> Select:
        likes, dislikes = reaction_count_columns()
        return (
            select(Post, User.username, likes, dislikes)
            .join(User, User.id == Post.author_id)
            .outerjoin(
                Reaction,
                and_(Reaction.target_type == TARGET_POST, Reaction.target_id == Post.id),
            )
            .group_by(Post.id, User.username)
            .options(selectinload(Post.categories))
        )

    @staticmethod
    def _to_post_view(post: Post, author: str, likes: int, dislikes: int) -> PostView:
        return PostView(
            id=post.id,
            title=post.title,
            content=post.content,
            author_id=post.author_id,
            author=author,
            created_at=as_utc(post.created_at),
            likes=int(likes),
            dislikes=int(dislikes),
            categories=[category.name for category in post.categories],
        )

    def list_posts(self, post_filter: PostFilter) -> list[PostView]:
        """Return posts newest first, annotated with reaction counts.

        Args:
            post_filter: Category, author and liked-by restrictions plus a row cap.
        """
        stmt = self._posts_with_counts()
        if post_filter.categories:
            stmt = stmt.where(
                Post.id.in_(
                    select(PostCategory.post_id)
                    .join(Category, Category.id == PostCategory.category_id)
                    .where(Category.name.in_(post_filter.categories))
                )
            )
        if post_filter.author_id is not None:
            stmt = stmt.where(Post.author_id == post_filter.author_id)
        if post_filter.liked_by_user_id is not None:
            stmt = stmt.where(
                Post.id.in_(
                    select(Reaction.target_id).where(
                        Reaction.target_type == TARGET_POST,
                        Reaction.user_id == post_filter.liked_by_user_id,
                        Reaction.value == LIKE,
                    )
                )
            )
        stmt = stmt.order_by(Post.id.desc()).limit(post_filter.limit)
        return [self._to_post_view(*row) for row in self.session.execute(stmt).all()]

    def get_post(self, post_id: int) -> PostView | None:
        """Return one post with its comments, or None when it does not exist."""
        row = self.session.execute(
            self._posts_with_counts().where(Post.id == post_id)
        ).first()
        if row is None:
            return None
        view = self._to_post_view(*row)
        view.comments.extend(self.list_comments(post_id))
        return view

    def list_comments(self, post_id: int) -> list[CommentView]:
        """Return the comments of a post oldest first, with reaction counts."""
        likes, dislikes = reaction_count_columns()
        stmt = (
            select(Comment, User.username, likes, dislikes)
            .join(User, User.id == Comment.author_id)
            .outerjoin(
                Reaction,
                and_(
                    Reaction.target_type == TARGET_COMMENT,
                    Reaction.target_id == Comment.id,
                ),
            )
            .where(Comment.post_id == post_id)
            .group_by(Comment.id, User.username)
            .order_by(Comment.id.asc())
        )
        return [
            CommentView(
                id=comment.id,
                post_id=comment.post_id,
                author_id=comment.author_id,
                author=author,
                content=comment.content,
                created_at=as_utc(comment.created_at),
                likes=int(like_count),
                dislikes=int(dislike_count),
            )
            for comment, author, like_count, dislike_count in self.session.execute(stmt).all()
        ]

    def create_post(
        self,
        *,
        author_id: int,
        title: str,
        content: str,
        categories: list[str],
    ) -> Post:
        """Insert a post, creating any category that does not exist yet."""
        post = Post(author_id=author_id, title=title, content=content)
        post.categories = [self._get_or_create_category(name) for name in categories]
        self.session.add(post)
        self.session.flush()
        return post

    def _get_or_create_category(self, name: str) -> Category:
        category = self.session.scalars(select(Category).where(Category.name == name)).first()
        if category is None:
            category = Category(name=name)
            self.session.add(category)
            self.session.flush()
        return category

    def create_comment(self, *, post_id: int, author_id: int, content: str) -> Comment:
        """Insert a comment on an existing post."""
        comment = Comment(post_id=post_id, author_id=author_id, content=content)
        self.session.add(comment)
        self.session.flush()
        return comment

    def post_exists(self, post_id: int) -> bool:
        return self.session.get(Post, post_id) is not None

    def comment_post_id(self, comment_id: int) -> int | None:
        """Return the post a comment belongs to, or None for an unknown comment."""
        comment = self.session.get(Comment, comment_id)
        return comment.post_id if comment is not None else None

    def list_categories(self) -> list[str]:
        """Return every category name alphabetically."""
        return list(self.session.scalars(select(Category.name).order_by(Category.name.asc())))


def publish_post(
    session_factory: sessionmaker[Session],
    *,
    author_id: int,
    title: str,
    content: str,
    categories: list[str],
) -> int:
    """Insert a post and its new categories in one write transaction; return its id.

    A concurrent writer may create the same category first; the whole unit
    is then re-run once so it picks up the committed row.
    """

    def _insert() -> int:
        with write_transaction(session_factory, lock_user_id=author_id) as db:
            post = PostRepository(db).create_post(
                author_id=author_id,
                title=title,
                content=content,
                categories=categories,
            )
            return post.id

    try:
        return _insert()
    except IntegrityError:
        logger.info("Category insert for user %s lost a race, retrying", author_id)
        return _insert()
