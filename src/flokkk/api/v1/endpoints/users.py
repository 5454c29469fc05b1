# src/flokkk/api/v1/endpoints/users.py
"""User profile and follow endpoints."""

from typing import Any

from fastapi import APIRouter
from sqlalchemy import func
from sqlalchemy.orm import Session

from flokkk.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from flokkk.core.errors import NotFoundError, ValidationError
from flokkk.models import Follow, User
from flokkk.models.notification import NOTIFICATION_FOLLOW, ON_MODEL_USER
from flokkk.schemas import FollowRequest, FollowResponse, UserResponse
from flokkk.schemas.user import FollowStatus, UserStats
from flokkk.services import NotificationEmitter

router = APIRouter(prefix="/users", tags=["users"])


def _get_user_or_404(db: Session, username: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUserDep) -> User:
    """Get the authenticated user's profile."""
    return current_user


@router.get("/{username}", response_model=UserResponse)
async def get_user(username: str, db: SessionDep) -> User:
    return _get_user_or_404(db, username)


@router.get("/{username}/stats", response_model=UserStats)
async def get_user_stats(
    username: str,
    current_user: OptionalUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Follower and following counts; ``is_following`` is false for anonymous callers."""
    user = _get_user_or_404(db, username)
    followers = (
        db.query(func.count()).select_from(Follow).filter(Follow.following_id == user.id).scalar()
    )
    following = (
        db.query(func.count()).select_from(Follow).filter(Follow.follower_id == user.id).scalar()
    )
    is_following = (
        current_user is not None
        and db.get(Follow, (current_user.id, user.id)) is not None
    )
    return {
        "followers": int(followers or 0),
        "following": int(following or 0),
        "is_following": is_following,
        "discussions": user.discussions,
    }


@router.get("/{username}/follow", response_model=FollowStatus)
async def get_follow_status(
    username: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, bool]:
    """Tell whether the caller follows ``username``."""
    target = _get_user_or_404(db, username)
    return {"is_following": db.get(Follow, (current_user.id, target.id)) is not None}


@router.post("/{username}/follow", response_model=FollowResponse)
async def follow_user(
    username: str,
    payload: FollowRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Follow or unfollow another user.

    Following someone already followed, or unfollowing someone not followed,
    changes nothing.

    Raises:
        NotFoundError: If the user does not exist
        ValidationError: If the caller tries to follow themselves
    """
    target = _get_user_or_404(db, username)
    if target.id == current_user.id:
        raise ValidationError("You cannot follow yourself")

    existing = db.get(Follow, (current_user.id, target.id))
    created = False
    if payload.action == "follow":
        message = "Successfully followed user"
        if existing is None:
            db.add(Follow(follower_id=current_user.id, following_id=target.id))
            db.query(User).filter(User.id == target.id).update(
                {User.subscribers: User.subscribers + 1},
                synchronize_session=False,
            )
            created = True
    else:
        message = "Successfully unfollowed user"
        if existing is not None:
            db.delete(existing)
            db.query(User).filter(User.id == target.id, User.subscribers > 0).update(
                {User.subscribers: User.subscribers - 1},
                synchronize_session=False,
            )
    db.commit()
    db.refresh(target)

    if created:
        NotificationEmitter.emit(
            db,
            recipient_id=target.id,
            type=NOTIFICATION_FOLLOW,
            content=f"{current_user.username} has started following you",
            sender=current_user,
            related_id=current_user.id,
            on_model=ON_MODEL_USER,
            thumbnail=current_user.avatar_url,
        )

    return {
        "message": message,
        "is_following": payload.action == "follow",
        "follower_count": target.subscribers,
    }
