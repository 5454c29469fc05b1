# src/flokkk/models/history.py
"""SQLAlchemy model for a user's recently viewed discussions."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from flokkk.db.session import Base
from flokkk.db.time import utcnow


class RecentlyViewed(Base):
    """One history entry per (user, discussion); a repeat view moves it to the top."""

    __tablename__ = "recently_viewed"
    __table_args__ = (
        Index("ix_recently_viewed_user_viewed", "user_id", "viewed_at"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
