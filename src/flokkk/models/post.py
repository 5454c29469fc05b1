# src/flokkk/models/post.py
"""SQLAlchemy models for discussions and their curated links."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flokkk.db.session import Base
from flokkk.db.time import utcnow


class Post(Base):
    """A discussion published by its owner.

    Owners curate ``creator_links``; other users contribute
    ``community_links`` through approved link contributions.
    """

    __tablename__ = "post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str | None] = mapped_column(String(32), nullable=True)
    hashtags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    media_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    allow_contributions: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Comment count.
    discussions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    shares: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    creator_links: Mapped[list[CreatorLink]] = relationship(
        "CreatorLink",
        cascade="all, delete-orphan",
        order_by="CreatorLink.position",
    )
    community_links: Mapped[list[CommunityLink]] = relationship(
        "CommunityLink",
        cascade="all, delete-orphan",
        order_by="CommunityLink.position",
    )


class CreatorLink(Base):
    """A link curated by the post owner; addressed by its position."""

    __tablename__ = "creator_link"
    __table_args__ = (UniqueConstraint("post_id", "position", name="uq_creator_link_position"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Derived from the vote ledger; never written directly.
    vote_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class CommunityLink(Base):
    """A link contributed by another user and approved by the post owner."""

    __tablename__ = "community_link"
    __table_args__ = (UniqueConstraint("post_id", "position", name="uq_community_link_position"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    contributor_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
    )
    vote_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
