# src/flokkk/models/notification.py
"""SQLAlchemy model for user notifications."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flokkk.db.session import Base
from flokkk.db.time import utcnow

NOTIFICATION_REPLY = "reply"
NOTIFICATION_LIKE = "like"
NOTIFICATION_FOLLOW = "follow"
NOTIFICATION_NEW_POST = "new_post"
NOTIFICATION_CONTRIBUTION = "contribution"
NOTIFICATION_MENTION = "mention"
NOTIFICATION_QUOTA_WARNING = "quota_warning"
NOTIFICATION_QUOTA_EXHAUSTED = "quota_exhausted"

NOTIFICATION_TYPES = frozenset(
    {
        NOTIFICATION_REPLY,
        NOTIFICATION_LIKE,
        NOTIFICATION_FOLLOW,
        NOTIFICATION_NEW_POST,
        NOTIFICATION_CONTRIBUTION,
        NOTIFICATION_MENTION,
        NOTIFICATION_QUOTA_WARNING,
        NOTIFICATION_QUOTA_EXHAUSTED,
    }
)

# Models a notification's related_id may point at.
ON_MODEL_POST = "Post"
ON_MODEL_COMMENT = "Comment"
ON_MODEL_USER = "User"
ON_MODEL_COMMUNITY_POST = "CommunityPost"


class Notification(Base):
    """A message for one recipient about something another user did."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Recipient.
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Null for system notices.
    sender_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=True,
    )
    sender_username: Mapped[str | None] = mapped_column(String(64), nullable=True)
    related_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    on_model: Mapped[str | None] = mapped_column(String(32), nullable=True)
    thumbnail: Mapped[str | None] = mapped_column(Text, nullable=True)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
