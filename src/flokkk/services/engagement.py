"""Engagement tracking for discussions and community posts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from flokkk.db.time import utcnow
from flokkk.models import PostEngagement
from flokkk.models.engagement import CONTENT_COMMUNITY, CONTENT_DISCUSSION, ENGAGEMENT_FLAGS

CONTENT_TYPES = (CONTENT_DISCUSSION, CONTENT_COMMUNITY)


def _empty_counts() -> dict[str, int]:
    return {flag: 0 for flag in ENGAGEMENT_FLAGS}


@dataclass
class EngagementResult:
    """Outcome of a tracking call."""

    changed: bool
    flags: dict[str, bool]
    counts: dict[str, int] = field(default_factory=_empty_counts)


def _flag_sums() -> list:
    return [
        func.coalesce(
            func.sum(case((getattr(PostEngagement, f"has_{flag}").is_(True), 1), else_=0)),
            0,
        ).label(flag)
        for flag in ENGAGEMENT_FLAGS
    ]


class EngagementTracker:
    """Idempotent, monotonic per-user engagement flags."""

    @staticmethod
    def track(
        db: Session,
        content_type: str,
        post_id: int,
        user_id: int,
        flag: str,
    ) -> EngagementResult:
        """Set ``flag`` for (content_type, post_id, user_id) if it is not already set.

        A flag that is already true leaves the row untouched. The caller commits.
        """
        if content_type not in CONTENT_TYPES:
            raise ValueError(f"Unknown content type: {content_type}")
        if flag not in ENGAGEMENT_FLAGS:
            raise ValueError(f"Unknown engagement flag: {flag}")

        record = db.get(PostEngagement, (content_type, post_id, user_id))
        if record is None:
            record = PostEngagement(
                content_type=content_type,
                post_id=post_id,
                user_id=user_id,
                **{f"has_{name}": False for name in ENGAGEMENT_FLAGS},
            )
            db.add(record)

        changed = False
        if not getattr(record, f"has_{flag}"):
            setattr(record, f"has_{flag}", True)
            setattr(record, f"last_{flag}_at", utcnow())
            changed = True
            db.flush()

        return EngagementResult(
            changed=changed,
            flags=EngagementTracker.flags_of(record),
            counts=EngagementTracker.counts(db, content_type, post_id),
        )

    @staticmethod
    def flags_of(record: PostEngagement | None) -> dict[str, bool]:
        if record is None:
            return {flag: False for flag in ENGAGEMENT_FLAGS}
        return {flag: bool(getattr(record, f"has_{flag}")) for flag in ENGAGEMENT_FLAGS}

    @staticmethod
    def counts(db: Session, content_type: str, post_id: int) -> dict[str, int]:
        """Count users per flag for one post."""
        row = (
            db.query(*_flag_sums())
            .filter(
                PostEngagement.content_type == content_type,
                PostEngagement.post_id == post_id,
            )
            .one()
        )
        return {flag: int(getattr(row, flag) or 0) for flag in ENGAGEMENT_FLAGS}

    @staticmethod
    def counts_by_post(
        db: Session,
        content_type: str,
        post_ids: Iterable[int],
    ) -> dict[int, dict[str, int]]:
        """Count users per flag for many posts with one grouped query."""
        ids = list(post_ids)
        if not ids:
            return {}
        rows = (
            db.query(PostEngagement.post_id, *_flag_sums())
            .filter(
                PostEngagement.content_type == content_type,
                PostEngagement.post_id.in_(ids),
            )
            .group_by(PostEngagement.post_id)
            .all()
        )
        return {
            row.post_id: {flag: int(getattr(row, flag) or 0) for flag in ENGAGEMENT_FLAGS}
            for row in rows
        }
