# src/flokkk/api/v1/endpoints/studio.py
"""Creator studio: analytics and editing of the caller's own posts."""

from typing import Any

from fastapi import APIRouter, Query

from flokkk.api.v1.dependencies import CurrentUserDep, SessionDep
from flokkk.core.errors import ValidationError
from flokkk.models.engagement import CONTENT_DISCUSSION
from flokkk.schemas.studio import (
    StudioContentType,
    StudioMetricsResponse,
    StudioPostList,
    StudioPostUpdate,
    StudioPostUpdateResponse,
)
from flokkk.services import StudioService

router = APIRouter(prefix="/studio", tags=["studio"])


@router.get("/metrics", response_model=StudioMetricsResponse)
async def get_metrics(
    current_user: CurrentUserDep,
    db: SessionDep,
    type: StudioContentType = Query("all"),
) -> dict[str, Any]:
    """Aggregate engagement across the caller's discussions and community posts."""
    return StudioService.get_metrics(db, current_user.id, type).as_dict()


@router.get("/posts", response_model=StudioPostList)
async def list_studio_posts(
    current_user: CurrentUserDep,
    db: SessionDep,
    type: StudioContentType = Query("all"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict[str, Any]:
    """One page of the caller's content with per-post counts, newest first."""
    posts, total = StudioService.list_posts(db, current_user.id, type, page, limit)
    return {"posts": posts, "page": page, "limit": limit, "total": total}


@router.patch("/posts/{post_id}", response_model=StudioPostUpdateResponse)
async def update_studio_post(
    post_id: int,
    payload: StudioPostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Edit the title, content or hashtags of one of the caller's posts.

    Args:
        post_id: ID of the discussion or community post
        payload: Fields to change, plus an optional content type
        current_user: Authenticated owner
        db: Database session

    Returns:
        The edited post tagged with its content type

    Raises:
        NotFoundError: If the caller owns no such post
        ValidationError: If hashtags are sent for a community post
    """
    changes = payload.model_dump(include={"title", "content", "hashtags"})
    if changes["title"] is not None:
        changes["title"] = changes["title"].strip()
        if not changes["title"]:
            raise ValidationError("Title cannot be empty")

    post, kind = StudioService.update_post(
        db, current_user.id, post_id, changes, payload.content_type
    )
    db.commit()
    db.refresh(post)
    return {
        "message": "Post updated successfully",
        "post": {
            "id": post.id,
            "type": kind,
            "title": post.title,
            "content": post.content,
            "hashtags": post.hashtags if kind == CONTENT_DISCUSSION else [],
            "created_at": post.created_at,
        },
    }
