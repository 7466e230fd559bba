"""Error taxonomy shared by the stores, the services and the HTTP layer."""

from __future__ import annotations

__all__ = [
    "ForumError",
    "InvalidCredentials",
    "AuthenticationRequired",
    "InvalidTarget",
    "InvalidValue",
    "InvalidRegistration",
    "DuplicateIdentity",
    "TransientStoreError",
    "NotFound",
]


class ForumError(Exception):
    """Base class for every business-level failure raised by Agora."""

    default_message = "Forum error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidCredentials(ForumError):
    """Login failed. Never says whether the identifier or the password was wrong."""

    default_message = "Invalid credentials"


class AuthenticationRequired(ForumError):
    """A protected operation was called without a live session."""

    default_message = "Please sign in to continue."


class InvalidTarget(ForumError):
    """Reaction target type is not one of the recognised kinds."""

    default_message = "Invalid reaction target"


class InvalidValue(ForumError):
    """Reaction value is not +1 or -1."""

    default_message = "Invalid reaction value"


class InvalidRegistration(ForumError):
    """Registration data is incomplete."""

    default_message = "Email, username and password are required"


class DuplicateIdentity(ForumError):
    """Email or username collides with an existing user."""

    default_message = "Email or username already taken"


class TransientStoreError(ForumError):
    """The store timed out or lost its connection. Safe to retry."""

    default_message = "Service temporarily unavailable"


class NotFound(ForumError):
    """A user, post or comment does not exist."""

    default_message = "Not found"
