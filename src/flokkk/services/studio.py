"""Creator studio analytics.

Aggregates engagement flags, comment counts and approved community links for
everything a user has published. Each source table is read with one grouped
query, so the cost does not grow with one query per post.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from flokkk.core.errors import NotFoundError, ValidationError
from flokkk.core.settings import settings
from flokkk.db.time import utcnow
from flokkk.models import Comment, CommunityLink, CommunityPost, Post
from flokkk.models.engagement import CONTENT_COMMUNITY, CONTENT_DISCUSSION, ENGAGEMENT_FLAGS
from flokkk.services.engagement import EngagementTracker

CONTENT_ALL = "all"


def engagement_rate(
    *,
    appeared: int,
    penetrated: int,
    saved: int,
    shared: int,
    comments: int,
    community_links: int,
) -> float:
    """Return interactions per appearance as a percentage, rounded to 2 decimals.

    Zero appearances yields 0.0.
    """
    if appeared <= 0:
        return 0.0
    interactions = penetrated + saved + shared + comments + community_links
    return round(interactions / appeared * 100, 2)


@dataclass
class PostMetrics:
    """Counts for a single discussion or community post."""

    id: int
    title: str
    type: str
    created_at: datetime
    appeared: int = 0
    viewed: int = 0
    penetrated: int = 0
    saved: int = 0
    shared: int = 0
    comments: int = 0
    community_links: int = 0

    @property
    def engagement_rate(self) -> float:
        return engagement_rate(
            appeared=self.appeared,
            penetrated=self.penetrated,
            saved=self.saved,
            shared=self.shared,
            comments=self.comments,
            community_links=self.community_links,
        )

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["engagement_rate"] = self.engagement_rate
        return data


@dataclass
class StudioMetrics:
    """Aggregate metrics across a user's content."""

    total_posts: int = 0
    discussions: int = 0
    community_posts: int = 0
    appeared: int = 0
    viewed: int = 0
    penetrated: int = 0
    saved: int = 0
    shared: int = 0
    comments: int = 0
    community_links: int = 0
    engagement_rate: float = 0.0
    top_posts: list[dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class StudioService:
    """Read-only analytics over a user's published content."""

    @staticmethod
    def _discussion_metrics(db: Session, user_id: int) -> list[PostMetrics]:
        posts = (
            db.query(Post.id, Post.title, Post.created_at)
            .filter(Post.user_id == user_id)
            .all()
        )
        ids = [row.id for row in posts]
        engagement = EngagementTracker.counts_by_post(db, CONTENT_DISCUSSION, ids)

        comment_counts: dict[int, int] = {}
        link_counts: dict[int, int] = {}
        if ids:
            comment_counts = dict(
                db.query(Comment.post_id, func.count(Comment.id))
                .filter(Comment.post_id.in_(ids))
                .group_by(Comment.post_id)
                .all()
            )
            link_counts = dict(
                db.query(CommunityLink.post_id, func.count(CommunityLink.id))
                .filter(CommunityLink.post_id.in_(ids))
                .group_by(CommunityLink.post_id)
                .all()
            )

        return [
            PostMetrics(
                id=row.id,
                title=row.title,
                type=CONTENT_DISCUSSION,
                created_at=row.created_at,
                comments=int(comment_counts.get(row.id, 0)),
                community_links=int(link_counts.get(row.id, 0)),
                **engagement.get(row.id, {}),
            )
            for row in posts
        ]

    @staticmethod
    def _community_metrics(db: Session, user_id: int) -> list[PostMetrics]:
        posts = (
            db.query(CommunityPost.id, CommunityPost.title, CommunityPost.created_at)
            .filter(CommunityPost.user_id == user_id)
            .all()
        )
        engagement = EngagementTracker.counts_by_post(
            db, CONTENT_COMMUNITY, [row.id for row in posts]
        )
        # Community posts have no comment threads or contributed links.
        return [
            PostMetrics(
                id=row.id,
                title=row.title,
                type=CONTENT_COMMUNITY,
                created_at=row.created_at,
                **engagement.get(row.id, {}),
            )
            for row in posts
        ]

    @staticmethod
    def collect(db: Session, user_id: int, content_type: str = CONTENT_ALL) -> list[PostMetrics]:
        """Return per-post metrics for the requested content type."""
        if content_type not in (CONTENT_ALL, CONTENT_DISCUSSION, CONTENT_COMMUNITY):
            raise ValueError(f"Unknown content type: {content_type}")
        items: list[PostMetrics] = []
        if content_type in (CONTENT_ALL, CONTENT_DISCUSSION):
            items.extend(StudioService._discussion_metrics(db, user_id))
        if content_type in (CONTENT_ALL, CONTENT_COMMUNITY):
            items.extend(StudioService._community_metrics(db, user_id))
        return items

    @staticmethod
    def get_metrics(
        db: Session,
        user_id: int,
        content_type: str = CONTENT_ALL,
        top: int | None = None,
    ) -> StudioMetrics:
        """Aggregate counts, engagement rate and the top posts by appearances."""
        items = StudioService.collect(db, user_id, content_type)
        limit = settings.studio_top_posts if top is None else top

        metrics = StudioMetrics(
            total_posts=len(items),
            discussions=sum(1 for item in items if item.type == CONTENT_DISCUSSION),
            community_posts=sum(1 for item in items if item.type == CONTENT_COMMUNITY),
        )
        for name in (*ENGAGEMENT_FLAGS, "comments", "community_links"):
            setattr(metrics, name, sum(getattr(item, name) for item in items))
        metrics.engagement_rate = engagement_rate(
            appeared=metrics.appeared,
            penetrated=metrics.penetrated,
            saved=metrics.saved,
            shared=metrics.shared,
            comments=metrics.comments,
            community_links=metrics.community_links,
        )

        ranked = sorted(items, key=lambda item: (item.appeared, item.created_at), reverse=True)
        metrics.top_posts = [item.as_dict() for item in ranked[:limit]]
        return metrics

    @staticmethod
    def list_posts(
        db: Session,
        user_id: int,
        content_type: str = CONTENT_ALL,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return one page of the user's content, newest first, with counts."""
        items = sorted(
            StudioService.collect(db, user_id, content_type),
            key=lambda item: item.created_at,
            reverse=True,
        )
        start = (page - 1) * limit
        return [item.as_dict() for item in items[start : start + limit]], len(items)

    @staticmethod
    def find_owned(
        db: Session,
        user_id: int,
        post_id: int,
        content_type: str | None = None,
    ) -> tuple[Post | CommunityPost, str]:
        """Resolve ``post_id`` among the user's own content.

        Without a content type the discussion is tried before the community post.

        Raises:
            NotFoundError: If the user owns no such post
        """
        candidates = {CONTENT_DISCUSSION: Post, CONTENT_COMMUNITY: CommunityPost}
        kinds = [content_type] if content_type else [CONTENT_DISCUSSION, CONTENT_COMMUNITY]
        for kind in kinds:
            model = candidates[kind]
            post = (
                db.query(model)
                .filter(model.id == post_id, model.user_id == user_id)
                .first()
            )
            if post is not None:
                return post, kind
        raise NotFoundError("Post not found or you do not have permission to edit it")

    @staticmethod
    def update_post(
        db: Session,
        user_id: int,
        post_id: int,
        changes: dict[str, Any],
        content_type: str | None = None,
    ) -> tuple[Post | CommunityPost, str]:
        """Apply title, content and hashtag edits to the user's own post.

        ``None`` values leave a field unchanged. The caller commits.

        Raises:
            NotFoundError: If the user owns no such post
            ValidationError: If hashtags are sent for a community post
        """
        post, kind = StudioService.find_owned(db, user_id, post_id, content_type)
        edits = {name: value for name, value in changes.items() if value is not None}
        if kind == CONTENT_COMMUNITY and "hashtags" in edits:
            raise ValidationError("Community posts do not have hashtags")

        for name, value in edits.items():
            setattr(post, name, value)
        if kind == CONTENT_DISCUSSION:
            post.updated_at = utcnow()
        db.flush()
        return post, kind
