"""SQLAlchemy models for the Agora forum."""

from .auth_session import AuthSession
from .post import Category, Comment, Post, PostCategory
from .reaction import Reaction
from .user import User

__all__ = [
    "AuthSession",
    "Category", "Comment", "Post", "PostCategory",
    "Reaction",
    "User",
]
