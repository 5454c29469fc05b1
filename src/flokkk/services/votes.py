"""Vote ledger shared by comments, links and community posts.

Each votable entity stores its per-user votes as rows of the ``vote`` table
and keeps a scalar counter column equal to the sum of those rows. Both are
changed in the caller's transaction; the counter is moved with an atomic SQL
increment rather than a read-modify-write.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from flokkk.core.errors import ValidationError
from flokkk.models import Comment, CommunityLink, CommunityPost, CreatorLink, Vote
from flokkk.models.vote import (
    VOTE_ENTITY_COMMENT,
    VOTE_ENTITY_COMMUNITY_LINK,
    VOTE_ENTITY_COMMUNITY_POST,
    VOTE_ENTITY_CREATOR_LINK,
)

VALID_VOTES = (1, -1, 0)


@dataclass(frozen=True)
class VoteTarget:
    """A votable row: its ledger key, its model, counter column and owner."""

    entity_type: str
    entity_id: int
    model: Any
    counter: str
    owner_id: int | None

    @classmethod
    def for_comment(cls, comment: Comment) -> VoteTarget:
        return cls(VOTE_ENTITY_COMMENT, comment.id, Comment, "likes", comment.user_id)

    @classmethod
    def for_creator_link(cls, link: CreatorLink, owner_id: int) -> VoteTarget:
        return cls(VOTE_ENTITY_CREATOR_LINK, link.id, CreatorLink, "vote_count", owner_id)

    @classmethod
    def for_community_link(cls, link: CommunityLink) -> VoteTarget:
        return cls(
            VOTE_ENTITY_COMMUNITY_LINK,
            link.id,
            CommunityLink,
            "vote_count",
            link.contributor_id,
        )

    @classmethod
    def for_community_post(cls, post: CommunityPost) -> VoteTarget:
        return cls(
            VOTE_ENTITY_COMMUNITY_POST, post.id, CommunityPost, "vote_count", post.user_id
        )


@dataclass(frozen=True)
class VoteOutcome:
    """Result of applying a vote."""

    change: int
    vote_count: int
    user_vote: int

    @property
    def should_notify(self) -> bool:
        """A vote notifies the owner only when it moved the count and was not a removal."""
        return self.change != 0 and self.user_vote != 0

    def as_response(self) -> dict[str, Any]:
        return {
            "vote_count": self.vote_count,
            "user_vote": self.user_vote,
            "is_liked": self.user_vote == 1,
            "is_downvoted": self.user_vote == -1,
        }


class VoteLedger:
    """Apply and query votes."""

    @staticmethod
    def validate(vote: Any) -> int:
        """Return ``vote`` as an int or raise ``ValidationError``."""
        if isinstance(vote, bool) or vote not in VALID_VOTES:
            raise ValidationError("Invalid vote value")
        return int(vote)

    @staticmethod
    def compute_change(prior: int, vote: int) -> int:
        """Return how much the scalar counter moves when ``prior`` becomes ``vote``."""
        if vote == prior:
            return 0
        if vote == 0:
            return -prior
        return vote - prior

    @staticmethod
    def current_vote(db: Session, entity_type: str, entity_id: int, user_id: int) -> int:
        row = db.get(Vote, (entity_type, entity_id, user_id))
        return row.value if row is not None else 0

    @staticmethod
    def votes_for(
        db: Session,
        entity_type: str,
        entity_ids: Iterable[int],
        user_id: int,
    ) -> dict[int, int]:
        """Map each of ``entity_ids`` the user voted on to their vote."""
        ids = list(entity_ids)
        if not ids:
            return {}
        rows = (
            db.query(Vote.entity_id, Vote.value)
            .filter(
                Vote.entity_type == entity_type,
                Vote.entity_id.in_(ids),
                Vote.user_id == user_id,
            )
            .all()
        )
        return {row.entity_id: row.value for row in rows}

    @staticmethod
    def apply_vote(db: Session, target: VoteTarget, user_id: int, vote: int) -> VoteOutcome:
        """Record ``user_id``'s vote on ``target`` and move its counter.

        Repeating the current vote is a no-op. The caller commits.
        """
        vote = VoteLedger.validate(vote)
        existing = db.get(Vote, (target.entity_type, target.entity_id, user_id))
        prior = existing.value if existing is not None else 0
        change = VoteLedger.compute_change(prior, vote)

        if change:
            if vote == 0:
                db.delete(existing)
            elif existing is None:
                db.add(
                    Vote(
                        entity_type=target.entity_type,
                        entity_id=target.entity_id,
                        user_id=user_id,
                        value=vote,
                    )
                )
            else:
                existing.value = vote
            db.flush()

            column = getattr(target.model, target.counter)
            db.query(target.model).filter(target.model.id == target.entity_id).update(
                {column: column + change},
                synchronize_session="fetch",
            )

        vote_count = (
            db.query(getattr(target.model, target.counter))
            .filter(target.model.id == target.entity_id)
            .scalar()
        )
        return VoteOutcome(change=change, vote_count=int(vote_count or 0), user_vote=vote)

    @staticmethod
    def clear(db: Session, entity_type: str, entity_ids: Iterable[int]) -> None:
        """Drop all ledger rows for entities that are being deleted."""
        ids = list(entity_ids)
        if not ids:
            return
        db.query(Vote).filter(
            Vote.entity_type == entity_type,
            Vote.entity_id.in_(ids),
        ).delete(synchronize_session=False)
