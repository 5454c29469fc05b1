# src/flokkk/api/v1/endpoints/votes.py
"""Voting endpoints for comments, discussion links and community posts."""

from typing import Any

from fastapi import APIRouter
from sqlalchemy.orm import Session

from flokkk.api.v1.dependencies import CurrentUserDep, SessionDep
from flokkk.core.errors import NotFoundError
from flokkk.models import Comment, CommunityLink, CommunityPost, CreatorLink, Post, User
from flokkk.models.notification import NOTIFICATION_LIKE, ON_MODEL_COMMUNITY_POST, ON_MODEL_POST
from flokkk.schemas import LinkVoteRequest, VoteRequest, VoteResponse
from flokkk.services import NotificationEmitter, VoteLedger, VoteTarget
from flokkk.services.votes import VoteOutcome

from .posts import get_post_or_404

router = APIRouter(tags=["votes"])


def _direction(outcome: VoteOutcome) -> str:
    return "upvoted" if outcome.user_vote == 1 else "downvoted"


def _get_link_or_404(db: Session, model: Any, post_id: int, link_index: int) -> Any:
    link = (
        db.query(model)
        .filter(model.post_id == post_id, model.position == link_index)
        .first()
    )
    if link is None:
        raise NotFoundError("Link not found")
    return link


def _notify_link_vote(
    db: Session,
    target: VoteTarget,
    outcome: VoteOutcome,
    voter: User,
    post: Post,
    link_title: str,
) -> None:
    if not outcome.should_notify or target.owner_id is None:
        return
    NotificationEmitter.emit(
        db,
        recipient_id=target.owner_id,
        type=NOTIFICATION_LIKE,
        content=f'{voter.username} {_direction(outcome)} your link "{link_title}"',
        sender=voter,
        related_id=post.id,
        on_model=ON_MODEL_POST,
    )


@router.post("/comments/{comment_id}/vote", response_model=VoteResponse)
async def vote_on_comment(
    comment_id: int,
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Upvote, downvote or clear a vote on a comment.

    Args:
        comment_id: ID of the comment
        vote_data: 1, -1 or 0 to remove the caller's vote
        current_user: Authenticated voter
        db: Database session

    Returns:
        The vote envelope with the comment's new like count

    Raises:
        ValidationError: If the vote value is not 1, -1 or 0
        NotFoundError: If the comment does not exist
    """
    VoteLedger.validate(vote_data.vote)
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")

    outcome = VoteLedger.apply_vote(
        db, VoteTarget.for_comment(comment), current_user.id, vote_data.vote
    )
    db.commit()

    if outcome.should_notify:
        post = db.get(Post, comment.post_id)
        title = post.title if post is not None else ""
        NotificationEmitter.emit(
            db,
            recipient_id=comment.user_id,
            type=NOTIFICATION_LIKE,
            content=f'{current_user.username} {_direction(outcome)} your comment on "{title}"',
            sender=current_user,
            related_id=comment.post_id,
            on_model=ON_MODEL_POST,
        )
    return outcome.as_response()


@router.post("/posts/{post_id}/vote-creator", response_model=VoteResponse)
async def vote_on_creator_link(
    post_id: int,
    vote_data: LinkVoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Vote on one of the owner's curated links, addressed by its position."""
    VoteLedger.validate(vote_data.vote)
    post = get_post_or_404(db, post_id)
    link = _get_link_or_404(db, CreatorLink, post.id, vote_data.link_index)

    target = VoteTarget.for_creator_link(link, post.user_id)
    outcome = VoteLedger.apply_vote(db, target, current_user.id, vote_data.vote)
    db.commit()

    _notify_link_vote(db, target, outcome, current_user, post, link.title)
    return outcome.as_response()


@router.post("/posts/{post_id}/vote-community", response_model=VoteResponse)
async def vote_on_community_link(
    post_id: int,
    vote_data: LinkVoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Vote on a contributed link; its contributor is the one notified."""
    VoteLedger.validate(vote_data.vote)
    post = get_post_or_404(db, post_id)
    link = _get_link_or_404(db, CommunityLink, post.id, vote_data.link_index)

    target = VoteTarget.for_community_link(link)
    outcome = VoteLedger.apply_vote(db, target, current_user.id, vote_data.vote)
    db.commit()

    _notify_link_vote(db, target, outcome, current_user, post, link.title)
    return outcome.as_response()


@router.post("/community-posts/{post_id}/vote", response_model=VoteResponse)
async def vote_on_community_post(
    post_id: int,
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Upvote, downvote or clear a vote on a community post.

    Raises:
        ValidationError: If the vote value is not 1, -1 or 0
        NotFoundError: If the community post does not exist
    """
    VoteLedger.validate(vote_data.vote)
    post = db.get(CommunityPost, post_id)
    if post is None:
        raise NotFoundError("Community post not found")

    outcome = VoteLedger.apply_vote(
        db, VoteTarget.for_community_post(post), current_user.id, vote_data.vote
    )
    db.commit()

    if outcome.should_notify:
        NotificationEmitter.emit(
            db,
            recipient_id=post.user_id,
            type=NOTIFICATION_LIKE,
            content=(
                f'{current_user.username} {_direction(outcome)} '
                f'your community post "{post.title}"'
            ),
            sender=current_user,
            related_id=post.id,
            on_model=ON_MODEL_COMMUNITY_POST,
        )
    return outcome.as_response()
