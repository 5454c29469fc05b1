# src/flokkk/api/v1/endpoints/history.py
"""Recently viewed discussions for the signed-in user."""

from typing import Any

from fastapi import APIRouter, Query

from flokkk.api.v1.dependencies import CurrentUserDep, SessionDep
from flokkk.core.errors import NotFoundError
from flokkk.core.settings import settings
from flokkk.schemas import MessageResponse
from flokkk.schemas.history import ClearHistoryResponse, HistoryList, TrackViewRequest
from flokkk.services import RecentlyViewedService

from .posts import get_post_or_404

router = APIRouter(prefix="/recently-viewed", tags=["recently-viewed"])


@router.post("/track", response_model=MessageResponse)
async def track_view(
    payload: TrackViewRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, str]:
    """Put a discussion at the top of the caller's history.

    Raises:
        NotFoundError: If the discussion does not exist
    """
    post = get_post_or_404(db, payload.post_id)
    RecentlyViewedService.track(db, current_user.id, post.id)
    db.commit()
    return {"message": "View recorded successfully"}


@router.get("/", response_model=HistoryList)
async def list_recently_viewed(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int | None = Query(None, ge=1, le=100),
) -> dict[str, Any]:
    """Most recently viewed first."""
    items = RecentlyViewedService.list_items(
        db, current_user.id, limit or settings.recently_viewed_page_size
    )
    return {"items": items, "count": len(items)}


@router.delete("/clear", response_model=ClearHistoryResponse)
async def clear_history(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    removed = RecentlyViewedService.clear(db, current_user.id)
    db.commit()
    return {"message": "History cleared successfully", "cleared": removed > 0}


@router.delete("/{post_id}", response_model=MessageResponse)
async def remove_from_history(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, str]:
    if not RecentlyViewedService.remove(db, current_user.id, post_id):
        raise NotFoundError("Item not found in history")
    db.commit()
    return {"message": "Item removed from history"}
