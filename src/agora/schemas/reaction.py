"""Reaction-related Pydantic schemas."""

from pydantic import BaseModel, Field, field_validator


class ReactionCreate(BaseModel):
    """Schema for toggling a like or dislike."""

    target_type: str = Field(..., description='"post" or "comment"')
    target_id: int = Field(..., ge=1)
    value: int = Field(..., description="1 for like, -1 for dislike")

    @field_validator("target_type")
    @classmethod
    def normalize_target_type(cls, v: str) -> str:
        return v.strip().lower()


class ReactionResponse(BaseModel):
    """Outcome of a toggle plus the target's fresh counts."""

    action: str = Field(..., description="added, removed or switched")
    value: int = Field(..., description="Caller's reaction after the toggle, 0 when cleared")
    likes: int
    dislikes: int


class ReactionSummary(BaseModel):
    """Counts for one target and the caller's own reaction (0 for none or anonymous)."""

    target_type: str
    target_id: int
    likes: int
    dislikes: int
    my_reaction: int = 0
