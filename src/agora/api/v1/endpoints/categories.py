# src/agora/api/v1/endpoints/categories.py
"""Category listing for the Agora API."""

from fastapi import APIRouter

from agora.api.v1.dependencies import SessionDep
from agora.db.session import store_errors
from agora.repositories.post_repo import PostRepository

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=list[str])
def list_categories(db: SessionDep) -> list[str]:
    """Return every category name alphabetically."""
    with store_errors():
        return PostRepository(db).list_categories()
