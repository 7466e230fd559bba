"""Password hashing and session token primitives."""
from __future__ import annotations

import secrets

from passlib.context import CryptContext

# pbkdf2_sha256 ships with passlib itself, so no native bcrypt backend is needed.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)

SESSION_TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    """Hash a plain-text password with a salted, slow KDF."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a candidate password against a stored hash."""
    return pwd_context.verify(plain_password, hashed)


def dummy_verify() -> None:
    """Spend the same time as a real verification when no user matched."""
    pwd_context.dummy_verify()


def new_session_token() -> str:
    """Return an opaque, URL-safe token carrying 256 bits of entropy."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
