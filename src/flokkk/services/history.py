"""Per-user history of recently viewed discussions.

Each (user, discussion) pair has at most one entry; viewing a discussion
again only moves its timestamp. A user's history is capped, and the oldest
entries past the cap are dropped whenever a view is recorded.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from flokkk.core.settings import settings
from flokkk.db.time import utcnow
from flokkk.models import Post, RecentlyViewed, User

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200


def _preview(text: str | None) -> str:
    text = text or ""
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[: PREVIEW_LENGTH - 3] + "..."


class RecentlyViewedService:
    """Record, list and forget viewed discussions."""

    @staticmethod
    def track(db: Session, user_id: int, post_id: int) -> RecentlyViewed:
        """Record a view of ``post_id`` now. The caller commits."""
        entry = db.get(RecentlyViewed, (user_id, post_id))
        if entry is None:
            entry = RecentlyViewed(user_id=user_id, post_id=post_id, viewed_at=utcnow())
            db.add(entry)
        else:
            entry.viewed_at = utcnow()
        db.flush()
        RecentlyViewedService._prune(db, user_id)
        return entry

    @staticmethod
    def _prune(db: Session, user_id: int) -> None:
        keep = settings.recently_viewed_max_items
        stale = [
            post_id
            for (post_id,) in db.query(RecentlyViewed.post_id)
            .filter(RecentlyViewed.user_id == user_id)
            .order_by(RecentlyViewed.viewed_at.desc(), RecentlyViewed.post_id.desc())
            .offset(keep)
            .all()
        ]
        if stale:
            logger.debug("Dropping %d old history entries for user %s", len(stale), user_id)
            db.query(RecentlyViewed).filter(
                RecentlyViewed.user_id == user_id,
                RecentlyViewed.post_id.in_(stale),
            ).delete(synchronize_session=False)

    @staticmethod
    def list_items(db: Session, user_id: int, limit: int) -> list[dict[str, Any]]:
        """Return the newest ``limit`` entries with their discussion and its author."""
        rows = (
            db.query(RecentlyViewed, Post, User)
            .join(Post, Post.id == RecentlyViewed.post_id)
            .join(User, User.id == Post.user_id)
            .filter(RecentlyViewed.user_id == user_id)
            .order_by(RecentlyViewed.viewed_at.desc(), RecentlyViewed.post_id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": post.id,
                "title": post.title,
                "description": _preview(post.content),
                "thumbnail": post.media_urls[0] if post.media_urls else None,
                "author": {"username": author.username, "avatar_url": author.avatar_url},
                "discussion_count": post.discussions,
                "posted_at": post.created_at,
                "viewed_at": entry.viewed_at,
            }
            for entry, post, author in rows
        ]

    @staticmethod
    def remove(db: Session, user_id: int, post_id: int) -> bool:
        """Forget one entry; False when it was not in the history."""
        deleted = (
            db.query(RecentlyViewed)
            .filter(RecentlyViewed.user_id == user_id, RecentlyViewed.post_id == post_id)
            .delete(synchronize_session=False)
        )
        return bool(deleted)

    @staticmethod
    def clear(db: Session, user_id: int) -> int:
        """Forget every entry and return how many there were."""
        return (
            db.query(RecentlyViewed)
            .filter(RecentlyViewed.user_id == user_id)
            .delete(synchronize_session=False)
        )
