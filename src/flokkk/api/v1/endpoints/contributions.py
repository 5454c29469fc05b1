# src/flokkk/api/v1/endpoints/contributions.py
"""Link contributions: users propose links, discussion owners approve or decline."""

from typing import Any, Literal

from fastapi import APIRouter, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from flokkk.api.v1.dependencies import CurrentUserDep, SessionDep
from flokkk.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from flokkk.db.time import utcnow
from flokkk.models import CommunityLink, LinkContribution, Post, User
from flokkk.models.contribution import (
    CONTRIBUTION_APPROVED,
    CONTRIBUTION_DECLINED,
    CONTRIBUTION_PENDING,
)
from flokkk.models.notification import NOTIFICATION_CONTRIBUTION, ON_MODEL_POST
from flokkk.schemas.contribution import (
    ContributionAction,
    ContributionCreate,
    ContributionResponse,
)
from flokkk.services import NotificationEmitter

from .posts import get_post_or_404

router = APIRouter(prefix="/link-contributions", tags=["link-contributions"])


def _serialize(db: Session, contribution: LinkContribution) -> dict[str, Any]:
    post = db.get(Post, contribution.post_id)
    contributor = db.get(User, contribution.contributor_id)
    return {
        "id": contribution.id,
        "post_id": contribution.post_id,
        "post_title": post.title if post is not None else None,
        "contributor_id": contribution.contributor_id,
        "contributor_username": contributor.username if contributor is not None else None,
        "creator_id": contribution.creator_id,
        "title": contribution.title,
        "url": contribution.url,
        "description": contribution.description,
        "status": contribution.status,
        "created_at": contribution.created_at,
        "resolved_at": contribution.resolved_at,
    }


@router.post("/", response_model=ContributionResponse, status_code=status.HTTP_201_CREATED)
async def submit_contribution(
    payload: ContributionCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Propose a link for someone else's discussion.

    Raises:
        NotFoundError: If the discussion does not exist
        ValidationError: If the discussion does not accept contributions, or
            the caller owns it
    """
    post = get_post_or_404(db, payload.post_id)
    if not post.allow_contributions:
        raise ValidationError("This discussion does not accept link contributions")
    if post.user_id == current_user.id:
        raise ValidationError("You cannot contribute links to your own discussion")

    contribution = LinkContribution(
        post_id=post.id,
        contributor_id=current_user.id,
        creator_id=post.user_id,
        title=payload.title.strip(),
        url=payload.url,
        description=payload.description,
        status=CONTRIBUTION_PENDING,
    )
    db.add(contribution)
    db.commit()
    db.refresh(contribution)

    NotificationEmitter.emit(
        db,
        recipient_id=post.user_id,
        type=NOTIFICATION_CONTRIBUTION,
        content=(
            f'{current_user.username} contributed a link "{contribution.title}" '
            f'to your discussion: "{post.title}"'
        ),
        sender=current_user,
        related_id=post.id,
        on_model=ON_MODEL_POST,
    )
    return _serialize(db, contribution)


@router.get("/", response_model=list[ContributionResponse])
async def list_contributions(
    current_user: CurrentUserDep,
    db: SessionDep,
    status_filter: Literal["pending", "approved", "declined", "all"] = Query(
        "all", alias="status"
    ),
    type: Literal["received", "sent"] = Query("received"),
) -> list[dict[str, Any]]:
    """List contributions made to the caller's discussions, or by the caller."""
    query = db.query(LinkContribution)
    if type == "received":
        query = query.filter(LinkContribution.creator_id == current_user.id)
    else:
        query = query.filter(LinkContribution.contributor_id == current_user.id)
    if status_filter != "all":
        query = query.filter(LinkContribution.status == status_filter)

    contributions = query.order_by(
        LinkContribution.created_at.desc(), LinkContribution.id.desc()
    ).all()
    return [_serialize(db, contribution) for contribution in contributions]


@router.patch("/{contribution_id}", response_model=ContributionResponse)
async def resolve_contribution(
    contribution_id: int,
    payload: ContributionAction,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Approve or decline a pending contribution.

    Approving appends the link to the discussion's community links. Either
    way the contributor receives exactly one notification.

    Raises:
        NotFoundError: If the contribution or its discussion no longer exists
        PermissionDeniedError: If the caller is not the discussion owner
        ValidationError: If the contribution was already resolved
    """
    contribution = db.get(LinkContribution, contribution_id)
    if contribution is None:
        raise NotFoundError("Contribution not found")
    if contribution.creator_id != current_user.id:
        raise PermissionDeniedError("Only the discussion owner can review contributions")
    if contribution.status != CONTRIBUTION_PENDING:
        raise ValidationError(f"Contribution has already been {contribution.status}")
    post = get_post_or_404(db, contribution.post_id)

    if payload.action == "approve":
        last_position = (
            db.query(func.max(CommunityLink.position))
            .filter(CommunityLink.post_id == post.id)
            .scalar()
        )
        db.add(
            CommunityLink(
                post_id=post.id,
                position=0 if last_position is None else last_position + 1,
                title=contribution.title,
                url=contribution.url,
                description=contribution.description,
                contributor_id=contribution.contributor_id,
            )
        )
        contribution.status = CONTRIBUTION_APPROVED
        verb = "approved"
    else:
        contribution.status = CONTRIBUTION_DECLINED
        verb = "declined"
    contribution.resolved_at = utcnow()
    db.commit()
    db.refresh(contribution)
    db.expire(post, ["community_links"])

    NotificationEmitter.emit(
        db,
        recipient_id=contribution.contributor_id,
        type=NOTIFICATION_CONTRIBUTION,
        content=(
            f'{current_user.username} {verb} your link contribution "{contribution.title}" '
            f'to the discussion: "{post.title}"'
        ),
        sender=current_user,
        related_id=post.id,
        on_model=ON_MODEL_POST,
    )
    return _serialize(db, contribution)
