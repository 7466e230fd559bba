"""Stores and repositories sitting between the services and the database."""

from .post_repo import PostRepository, publish_post
from .reaction_repo import InMemoryReactionStore, ReactionStore, SqlReactionStore
from .records import (
    CommentView,
    PostFilter,
    PostView,
    ReactionCounts,
    ReactionKey,
    SessionRecord,
    UserRecord,
)
from .session_repo import InMemorySessionStore, SessionStore, SqlSessionStore
from .user_repo import UserRepository

__all__ = [
    "PostRepository", "UserRepository", "publish_post",
    "ReactionStore", "SqlReactionStore", "InMemoryReactionStore",
    "SessionStore", "SqlSessionStore", "InMemorySessionStore",
    "CommentView", "PostFilter", "PostView",
    "ReactionCounts", "ReactionKey", "SessionRecord", "UserRecord",
]
