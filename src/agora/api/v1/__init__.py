# src/agora/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    categories_router,
    posts_router,
    reactions_router,
)

__all__ = [
    "auth_router",
    "categories_router",
    "posts_router",
    "reactions_router",
]
