"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import CommentCreate, CommentResponse, PostCreate, PostDetailResponse, PostResponse
from .reaction import ReactionCreate, ReactionResponse, ReactionSummary
from .user import AuthResponse, LoginRequest, MessageResponse, RegisterRequest, UserResponse

__all__ = [
    "CommentCreate", "CommentResponse",
    "PostCreate", "PostDetailResponse", "PostResponse",
    "ReactionCreate", "ReactionResponse", "ReactionSummary",
    "AuthResponse", "LoginRequest", "MessageResponse", "RegisterRequest", "UserResponse",
]
