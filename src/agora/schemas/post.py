"""Post and comment Pydantic schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

MAX_CATEGORIES_PER_POST = 10

# Matches the width of categories.name.
CategoryName = Annotated[str, StringConstraints(strip_whitespace=True, max_length=64)]


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., max_length=200)
    content: str = Field(..., max_length=10_000)
    categories: list[CategoryName] = Field(
        default_factory=list,
        max_length=MAX_CATEGORIES_PER_POST,
        description="Existing or new category names",
    )

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class CommentCreate(BaseModel):
    """Schema for commenting on a post."""

    content: str = Field(..., max_length=5000)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Empty comment")
        return v


class CommentResponse(BaseModel):
    """Comment with its author and reaction counts."""

    id: int
    post_id: int
    author_id: int
    author: str
    content: str
    created_at: datetime
    likes: int = 0
    dislikes: int = 0

    model_config = ConfigDict(from_attributes=True)


class PostResponse(BaseModel):
    """Post with its author, categories and reaction counts."""

    id: int
    title: str
    content: str
    author_id: int
    author: str
    created_at: datetime
    likes: int = 0
    dislikes: int = 0
    categories: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PostDetailResponse(PostResponse):
    """Single post together with its comments, oldest first."""

    comments: list[CommentResponse] = Field(default_factory=list)
