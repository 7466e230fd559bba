"""Database configuration and utilities."""

from .session import (
    SessionLocal,
    get_session_factory,
    read_session,
    store_errors,
    write_transaction,
)

__all__ = [
    "SessionLocal",
    "get_session_factory",
    "read_session",
    "store_errors",
    "write_transaction",
]
