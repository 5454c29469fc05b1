# src/flokkk/models/vote.py
"""The vote ledger shared by every votable entity."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from flokkk.db.session import Base
from flokkk.db.time import utcnow

VOTE_ENTITY_COMMENT = "comment"
VOTE_ENTITY_CREATOR_LINK = "creator_link"
VOTE_ENTITY_COMMUNITY_LINK = "community_link"
VOTE_ENTITY_COMMUNITY_POST = "community_post"


class Vote(Base):
    """Per-user vote on a comment, a link or a community post.

    The owning entity keeps a scalar counter equal to the sum of its rows.
    """

    __tablename__ = "vote"
    __table_args__ = (
        CheckConstraint("value IN (1, -1)", name="ck_vote_value"),
        Index("ix_vote_entity", "entity_type", "entity_id"),
    )

    entity_type: Mapped[str] = mapped_column(String(32), primary_key=True)
    entity_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Composite primary key keeps one vote per user per entity.

    # 1 = upvote, -1 = downvote. A removed vote deletes the row.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
