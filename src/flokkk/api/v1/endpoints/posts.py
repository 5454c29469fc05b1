# src/flokkk/api/v1/endpoints/posts.py
"""Discussion endpoints for the flokkk API."""

from typing import Any

from fastapi import APIRouter, Query, status
from sqlalchemy.orm import Session

from flokkk.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from flokkk.core.errors import NotFoundError, PermissionDeniedError
from flokkk.models import (
    Comment,
    CommunityLink,
    CreatorLink,
    Follow,
    LinkContribution,
    Post,
    PostEngagement,
    RecentlyViewed,
    User,
)
from flokkk.models.engagement import CONTENT_DISCUSSION
from flokkk.models.notification import NOTIFICATION_NEW_POST, ON_MODEL_POST
from flokkk.models.vote import (
    VOTE_ENTITY_COMMENT,
    VOTE_ENTITY_COMMUNITY_LINK,
    VOTE_ENTITY_CREATOR_LINK,
)
from flokkk.schemas import MessageResponse, PostCreate, PostResponse
from flokkk.schemas.post import PostList
from flokkk.services import NotificationEmitter, VoteLedger

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_or_404(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def _serialize_links(
    db: Session,
    links: list[Any],
    entity_type: str,
    viewer: User | None,
) -> list[dict[str, Any]]:
    votes: dict[int, int] = {}
    if viewer is not None:
        votes = VoteLedger.votes_for(db, entity_type, (link.id for link in links), viewer.id)
    return [
        {
            "position": link.position,
            "title": link.title,
            "url": link.url,
            "description": link.description,
            "vote_count": link.vote_count,
            "contributor_id": getattr(link, "contributor_id", None),
            "user_vote": votes.get(link.id, 0),
        }
        for link in links
    ]


def serialize_post(db: Session, post: Post, viewer: User | None = None) -> dict[str, Any]:
    """Render a post with its links and, for a signed-in viewer, their link votes."""
    author = db.get(User, post.user_id)
    return {
        "id": post.id,
        "user_id": post.user_id,
        "username": author.username if author is not None else None,
        "title": post.title,
        "content": post.content,
        "category": post.category,
        "hashtags": post.hashtags or [],
        "media_urls": post.media_urls or [],
        "allow_contributions": post.allow_contributions,
        "discussions": post.discussions,
        "shares": post.shares,
        "created_at": post.created_at,
        "creator_links": _serialize_links(
            db, post.creator_links, VOTE_ENTITY_CREATOR_LINK, viewer
        ),
        "community_links": _serialize_links(
            db, post.community_links, VOTE_ENTITY_COMMUNITY_LINK, viewer
        ),
    }


@router.get("/", response_model=PostList)
async def list_posts(
    db: SessionDep,
    viewer: OptionalUserDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict[str, Any]:
    """List discussions, newest first."""
    query = db.query(Post)
    total = query.count()
    posts = (
        query.order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "posts": [serialize_post(db, post, viewer) for post in posts],
        "page": page,
        "limit": limit,
        "total": total,
    }


@router.get("/feed", response_model=PostList)
async def get_feed(
    current_user: CurrentUserDep,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict[str, Any]:
    """List discussions by the users the caller follows, newest first."""
    following = db.query(Follow.following_id).filter(Follow.follower_id == current_user.id)
    query = db.query(Post).filter(Post.user_id.in_(following))
    total = query.count()
    posts = (
        query.order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "posts": [serialize_post(db, post, current_user) for post in posts],
        "page": page,
        "limit": limit,
        "total": total,
    }


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> dict[str, Any]:
    """Get a discussion with its links.

    Raises:
        NotFoundError: If the post does not exist
    """
    post = get_post_or_404(db, post_id)
    return serialize_post(db, post, viewer)


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Create a discussion and tell the author's followers about it.

    Args:
        post_data: Title, body, media and the owner's curated links
        current_user: Authenticated author
        db: Database session

    Returns:
        The created discussion
    """
    new_post = Post(
        user_id=current_user.id,
        title=post_data.title.strip(),
        content=post_data.content,
        category=post_data.category,
        hashtags=post_data.hashtags,
        media_urls=post_data.media_urls,
        allow_contributions=post_data.allow_contributions,
    )
    for position, link in enumerate(post_data.creator_links):
        new_post.creator_links.append(
            CreatorLink(
                position=position,
                title=link.title,
                url=link.url,
                description=link.description,
            )
        )
    db.add(new_post)
    db.query(User).filter(User.id == current_user.id).update(
        {User.discussions: User.discussions + 1},
        synchronize_session=False,
    )
    db.commit()
    db.refresh(new_post)

    NotificationEmitter.fan_out(
        db,
        recipient_ids=NotificationEmitter.follower_ids(db, current_user.id),
        type=NOTIFICATION_NEW_POST,
        content=f'{current_user.username} posted a new discussion: "{new_post.title}"',
        sender=current_user,
        related_id=new_post.id,
        on_model=ON_MODEL_POST,
        thumbnail=new_post.media_urls[0] if new_post.media_urls else None,
    )
    return serialize_post(db, new_post, current_user)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, str]:
    """Delete a discussion with its comments, links, votes and engagement.

    Raises:
        NotFoundError: If the post does not exist
        PermissionDeniedError: If the caller does not own the post
    """
    post = get_post_or_404(db, post_id)
    if post.user_id != current_user.id:
        raise PermissionDeniedError("You can only delete your own discussions")

    comment_ids = [row.id for row in db.query(Comment.id).filter(Comment.post_id == post.id)]
    VoteLedger.clear(db, VOTE_ENTITY_COMMENT, comment_ids)
    VoteLedger.clear(db, VOTE_ENTITY_CREATOR_LINK, (link.id for link in post.creator_links))
    VoteLedger.clear(
        db, VOTE_ENTITY_COMMUNITY_LINK, (link.id for link in post.community_links)
    )
    # Replies reference their parents, so clear those pointers before the bulk delete.
    db.query(Comment).filter(Comment.post_id == post.id).update(
        {Comment.parent_id: None, Comment.reply_to_id: None},
        synchronize_session=False,
    )
    db.query(Comment).filter(Comment.post_id == post.id).delete(synchronize_session=False)
    db.query(LinkContribution).filter(LinkContribution.post_id == post.id).delete(
        synchronize_session=False
    )
    db.query(PostEngagement).filter(
        PostEngagement.content_type == CONTENT_DISCUSSION,
        PostEngagement.post_id == post.id,
    ).delete(synchronize_session=False)
    db.query(RecentlyViewed).filter(RecentlyViewed.post_id == post.id).delete(
        synchronize_session=False
    )
    db.query(CommunityLink).filter(CommunityLink.post_id == post.id).delete(
        synchronize_session=False
    )
    db.query(CreatorLink).filter(CreatorLink.post_id == post.id).delete(
        synchronize_session=False
    )
    db.expire(post, ["creator_links", "community_links"])
    db.delete(post)
    db.query(User).filter(User.id == current_user.id, User.discussions > 0).update(
        {User.discussions: User.discussions - 1},
        synchronize_session=False,
    )
    db.commit()
    return {"message": "Discussion deleted"}
