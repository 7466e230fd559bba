# src/agora/models/reaction.py
"""Models capturing like/dislike reactions on posts and comments."""

from __future__ import annotations

import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from agora.db.session import Base
from agora.db.time import utcnow

TARGET_POST = "post"
TARGET_COMMENT = "comment"
TARGET_TYPES = (TARGET_POST, TARGET_COMMENT)

LIKE = 1
DISLIKE = -1


class Reaction(Base):
    """Per-user reaction on a post or a comment.

    The composite primary key keeps at most one row per
    (user, target type, target id).
    """

    __tablename__ = "reactions"
    __table_args__ = (
        CheckConstraint("value IN (1, -1)", name="ck_reactions_value"),
        CheckConstraint(
            "target_type IN ('post', 'comment')",
            name="ck_reactions_target_type",
        ),
        Index("ix_reactions_target", "target_type", "target_id"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    target_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    target_id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # 1 = like, -1 = dislike.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
