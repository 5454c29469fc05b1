# src/flokkk/api/v1/endpoints/notifications.py
"""Notification feed for the signed-in user."""

from typing import Any

from fastapi import APIRouter, Body, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from flokkk.api.v1.dependencies import CurrentUserDep, SessionDep
from flokkk.core.errors import NotFoundError
from flokkk.core.settings import settings
from flokkk.models import Notification
from flokkk.models.notification import (
    NOTIFICATION_CONTRIBUTION,
    NOTIFICATION_FOLLOW,
    NOTIFICATION_LIKE,
    NOTIFICATION_NEW_POST,
    NOTIFICATION_REPLY,
)
from flokkk.schemas import MessageResponse, NotificationList, NotificationResponse, Pagination
from flokkk.schemas.notification import (
    NotificationFilter,
    NotificationUpdate,
    ReadAllRequest,
    ReadAllResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])

# Feed tab -> notification types shown under it
NOTIFICATION_GROUPS: dict[str, tuple[str, ...]] = {
    "posts": (NOTIFICATION_NEW_POST, NOTIFICATION_FOLLOW),
    "comments": (NOTIFICATION_REPLY,),
    "likes": (NOTIFICATION_LIKE,),
    "contributions": (NOTIFICATION_CONTRIBUTION,),
}


def _count_notifications(db: Session, user_id: int) -> dict[str, int]:
    """Totals per feed tab from one grouped query."""
    rows = (
        db.query(Notification.type, Notification.read, func.count(Notification.id))
        .filter(Notification.user_id == user_id)
        .group_by(Notification.type, Notification.read)
        .all()
    )
    counts = {"all": 0, "unread": 0}
    for group in NOTIFICATION_GROUPS:
        counts[group] = 0
        counts[f"{group}_unread"] = 0

    for type_, read, total in rows:
        counts["all"] += total
        if not read:
            counts["unread"] += total
        for group, types in NOTIFICATION_GROUPS.items():
            if type_ in types:
                counts[group] += total
                if not read:
                    counts[f"{group}_unread"] += total
    return counts


def _get_notification_or_404(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


@router.get("/", response_model=NotificationList)
async def list_notifications(
    current_user: CurrentUserDep,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    type: NotificationFilter = Query("all"),
    search: str | None = Query(None, max_length=200),
) -> dict[str, Any]:
    """List the caller's notifications, newest first.

    Args:
        current_user: Authenticated recipient
        db: Database session
        page: Page number, starting at 1
        limit: Page size; defaults to ``settings.notifications_page_size``
        type: Feed tab to filter by, or ``unread``
        search: Case-insensitive match on content or sender username

    Returns:
        The page, its pagination block and per-tab counts
    """
    limit = min(limit or settings.notifications_page_size, settings.notifications_max_page_size)

    query = db.query(Notification).filter(Notification.user_id == current_user.id)
    if type == "unread":
        query = query.filter(Notification.read.is_(False))
    elif type in NOTIFICATION_GROUPS:
        query = query.filter(Notification.type.in_(NOTIFICATION_GROUPS[type]))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Notification.content.ilike(pattern),
                Notification.sender_username.ilike(pattern),
            )
        )

    total = query.count()
    notifications = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "notifications": notifications,
        "pagination": Pagination.build(page, limit, total),
        "counts": _count_notifications(db, current_user.id),
    }


@router.patch("/read-all", response_model=ReadAllResponse)
async def mark_all_read(
    current_user: CurrentUserDep,
    db: SessionDep,
    payload: ReadAllRequest | None = Body(None),
) -> dict[str, Any]:
    """Mark every unread notification, or every unread one of a tab, as read."""
    query = db.query(Notification).filter(
        Notification.user_id == current_user.id,
        Notification.read.is_(False),
    )
    group = payload.type if payload is not None else None
    if group is not None:
        query = query.filter(Notification.type.in_(NOTIFICATION_GROUPS[group]))

    count = query.update({Notification.read: True}, synchronize_session=False)
    db.commit()
    return {"message": "Notifications marked as read", "count": count}


@router.patch("/{notification_id}", response_model=NotificationResponse)
async def update_notification(
    notification_id: int,
    payload: NotificationUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Notification:
    notification = _get_notification_or_404(db, notification_id, current_user.id)
    notification.read = payload.read
    db.commit()
    db.refresh(notification)
    return notification


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, str]:
    notification = _get_notification_or_404(db, notification_id, current_user.id)
    db.delete(notification)
    db.commit()
    return {"message": "Notification deleted"}
