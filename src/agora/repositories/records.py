"""Plain records handed across the store boundary.

Each record is mapped from its ORM row field by field, so the services never
touch SQLAlchemy instances and the in-memory stores can produce the same
shapes.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field

from agora.db.time import as_utc
from agora.models import AuthSession, User


@dataclass(frozen=True)
class UserRecord:
    """Registered user as seen by the credential store."""

    id: int
    email: str
    username: str
    password_hash: str
    created_at: datetime.datetime

    @classmethod
    def from_row(cls, row: User) -> UserRecord:
        return cls(
            id=row.id,
            email=row.email,
            username=row.username,
            password_hash=row.password_hash,
            created_at=as_utc(row.created_at),
        )


@dataclass(frozen=True)
class SessionRecord:
    """One login. Live while ``now < expires_at``."""

    token: str
    user_id: int
    created_at: datetime.datetime
    expires_at: datetime.datetime

    @classmethod
    def from_row(cls, row: AuthSession) -> SessionRecord:
        return cls(
            token=row.token,
            user_id=row.user_id,
            created_at=as_utc(row.created_at),
            expires_at=as_utc(row.expires_at),
        )

    def to_row(self) -> AuthSession:
        return AuthSession(
            token=self.token,
            user_id=self.user_id,
            created_at=self.created_at,
            expires_at=self.expires_at,
        )


@dataclass(frozen=True)
class ReactionKey:
    """Composite key of the reaction ledger."""

    user_id: int
    target_type: str
    target_id: int


@dataclass(frozen=True)
class ReactionCounts:
    """Aggregated likes and dislikes of one target."""

    likes: int = 0
    dislikes: int = 0


@dataclass(frozen=True)
class PostFilter:
    """Selection applied when listing posts.

    ``categories`` matches posts carrying any of the names.
    """

    categories: tuple[str, ...] = ()
    author_id: int | None = None
    liked_by_user_id: int | None = None
    limit: int = 200


@dataclass(frozen=True)
class CommentView:
    """Comment joined with its author name and reaction counts."""

    id: int
    post_id: int
    author_id: int
    author: str
    content: str
    created_at: datetime.datetime
    likes: int
    dislikes: int


@dataclass(frozen=True)
class PostView:
    """Post joined with its author name, categories and reaction counts."""

    id: int
    title: str
    content: str
    author_id: int
    author: str
    created_at: datetime.datetime
    likes: int
    dislikes: int
    categories: list[str] = field(default_factory=list)
    comments: list[CommentView] = field(default_factory=list)
