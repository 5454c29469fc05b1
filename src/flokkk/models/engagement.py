# src/flokkk/models/engagement.py
"""Per-user engagement flags for discussions and community posts."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from flokkk.db.session import Base
from flokkk.db.time import utcnow

CONTENT_DISCUSSION = "discussion"
CONTENT_COMMUNITY = "community"

# Tracked flags; each maps to a has_<flag> column and a last_<flag>_at column.
ENGAGEMENT_FLAGS = ("appeared", "viewed", "penetrated", "saved", "shared")


class PostEngagement(Base):
    """One row per (content type, post, user).

    Flags only ever move from False to True.
    """

    __tablename__ = "post_engagement"
    __table_args__ = (
        Index("ix_post_engagement_post", "content_type", "post_id"),
    )

    content_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    # Discussion or community post id, depending on content_type.
    post_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )

    has_appeared: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_viewed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_penetrated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_saved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_shared: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    last_appeared_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_viewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_penetrated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_saved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_shared_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
