# src/flokkk/api/v1/endpoints/engagement.py
"""Per-user engagement tracking for discussions and community posts."""

from typing import Any, Literal

from fastapi import APIRouter
from sqlalchemy.orm import Session

from flokkk.api.v1.dependencies import CurrentUserDep, SessionDep
from flokkk.core.errors import NotFoundError
from flokkk.models import CommunityPost, Post, User
from flokkk.models.engagement import CONTENT_COMMUNITY, CONTENT_DISCUSSION
from flokkk.schemas.engagement import EngagementResponse
from flokkk.services import EngagementTracker

router = APIRouter(tags=["engagement"])

TrackAction = Literal["appear", "view", "click", "save", "share"]

# URL action -> stored flag
ACTION_FLAGS = {
    "appear": "appeared",
    "view": "viewed",
    "click": "penetrated",
    "save": "saved",
    "share": "shared",
}


def _track(
    db: Session,
    user: User,
    content_type: str,
    post_id: int,
    action: str,
) -> dict[str, Any]:
    flag = ACTION_FLAGS[action]
    result = EngagementTracker.track(db, content_type, post_id, user.id, flag)

    if result.changed and flag == "shared" and content_type == CONTENT_DISCUSSION:
        db.query(Post).filter(Post.id == post_id).update(
            {Post.shares: Post.shares + 1},
            synchronize_session=False,
        )
    db.commit()

    message = f"{flag.capitalize()} tracked" if result.changed else "Already tracked for this user"
    return {
        "message": message,
        "engagement": {f"has_{name}": value for name, value in result.flags.items()},
        "counts": result.counts,
    }


@router.post("/posts/{post_id}/track-{action}", response_model=EngagementResponse)
async def track_post_engagement(
    post_id: int,
    action: TrackAction,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Record that the caller saw, opened, clicked, saved or shared a discussion.

    Each flag is set at most once per user; repeating an action changes nothing.
    """
    if db.get(Post, post_id) is None:
        raise NotFoundError("Post not found")
    return _track(db, current_user, CONTENT_DISCUSSION, post_id, action)


@router.post("/community-posts/{post_id}/track-{action}", response_model=EngagementResponse)
async def track_community_post_engagement(
    post_id: int,
    action: TrackAction,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Community post counterpart of ``track_post_engagement``."""
    if db.get(CommunityPost, post_id) is None:
        raise NotFoundError("Community post not found")
    return _track(db, current_user, CONTENT_COMMUNITY, post_id, action)
