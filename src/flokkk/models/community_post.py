# src/flokkk/models/community_post.py
"""SQLAlchemy model for short-form community posts."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flokkk.db.session import Base
from flokkk.db.time import utcnow


class CommunityPost(Base):
    """A post on a user's community tab."""

    __tablename__ = "community_post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    media_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    # Raw page views, independent of per-user engagement flags.
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Sum of the post's rows in the vote ledger.
    vote_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
