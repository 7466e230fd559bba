"""Data access helpers for user accounts."""
from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from agora.models import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, user_id: int) -> User | None:
        """Return a user by primary key."""
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        """Return the user registered with ``email``."""
        return self.session.scalars(select(User).where(User.email == email)).first()

    def get_by_username(self, username: str) -> User | None:
        """Return the user registered as ``username``."""
        return self.session.scalars(select(User).where(User.username == username)).first()

    def identity_taken(self, email: str, username: str, *, shared_namespace: bool) -> bool:
        """Return True if ``email`` or ``username`` collides with an existing user.

        With ``shared_namespace`` both values are compared against both
        columns, so one user's email can never be another user's username.
        """
        if shared_namespace:
            values = (email, username)
            condition = or_(User.email.in_(values), User.username.in_(values))
        else:
            condition = or_(User.email == email, User.username == username)
        return self.session.execute(select(User.id).where(condition).limit(1)).first() is not None

    def create(self, *, email: str, username: str, password_hash: str) -> User:
        """Insert a new user and flush so the primary key is populated."""
        user = User(email=email, username=username, password_hash=password_hash)
        self.session.add(user)
        self.session.flush()
        return user
