"""Notification emitter used by every action that informs another user.

Notifications are a best-effort secondary write: callers commit their own
change first and then call the emitter, which writes in a separate
transaction. A failure here is logged and swallowed so it can never undo or
fail the action that triggered it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flokkk.models import Follow, Notification, User
from flokkk.models.notification import NOTIFICATION_TYPES

logger = logging.getLogger(__name__)


class NotificationEmitter:
    """Create notifications for recipients other than the acting user."""

    @staticmethod
    def emit(
        db: Session,
        *,
        recipient_id: int,
        type: str,
        content: str,
        sender: User | None,
        related_id: int | None = None,
        on_model: str | None = None,
        thumbnail: str | None = None,
    ) -> Notification | None:
        """Write one notification and commit it.

        Returns ``None`` without writing when ``sender`` is the recipient, or
        when the write fails.
        """
        if type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type: {type}")
        if sender is not None and sender.id == recipient_id:
            return None

        notification = Notification(
            user_id=recipient_id,
            type=type,
            content=content,
            sender_id=sender.id if sender is not None else None,
            sender_username=sender.username if sender is not None else None,
            related_id=related_id,
            on_model=on_model,
            thumbnail=thumbnail,
            read=False,
        )
        try:
            db.add(notification)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Failed to create %s notification for user %s", type, recipient_id
            )
            return None
        return notification

    @staticmethod
    def fan_out(
        db: Session,
        *,
        recipient_ids: Iterable[int],
        type: str,
        content: str,
        sender: User | None,
        related_id: int | None = None,
        on_model: str | None = None,
        thumbnail: str | None = None,
    ) -> int:
        """Notify each recipient in turn; returns how many notifications were written."""
        created = 0
        for recipient_id in recipient_ids:
            notification = NotificationEmitter.emit(
                db,
                recipient_id=recipient_id,
                type=type,
                content=content,
                sender=sender,
                related_id=related_id,
                on_model=on_model,
                thumbnail=thumbnail,
            )
            if notification is not None:
                created += 1
        return created

    @staticmethod
    def follower_ids(db: Session, user_id: int) -> list[int]:
        """Return the ids of everyone following ``user_id``."""
        rows = db.query(Follow.follower_id).filter(Follow.following_id == user_id).all()
        return [row.follower_id for row in rows]
