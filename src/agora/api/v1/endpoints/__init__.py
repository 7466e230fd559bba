# src/agora/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .categories import router as categories_router
from .posts import router as posts_router
from .reactions import router as reactions_router

__all__ = [
    "auth_router",
    "categories_router",
    "posts_router",
    "reactions_router",
]
