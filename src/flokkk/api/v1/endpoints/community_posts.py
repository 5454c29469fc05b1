# src/flokkk/api/v1/endpoints/community_posts.py
"""Community post endpoints."""

from fastapi import APIRouter, status

from flokkk.api.v1.dependencies import CurrentUserDep, SessionDep
from flokkk.core.errors import NotFoundError, PermissionDeniedError
from flokkk.models import CommunityPost, PostEngagement
from flokkk.models.engagement import CONTENT_COMMUNITY
from flokkk.models.vote import VOTE_ENTITY_COMMUNITY_POST
from flokkk.schemas import CommunityPostCreate, CommunityPostResponse, MessageResponse
from flokkk.services import VoteLedger

router = APIRouter(prefix="/community-posts", tags=["community-posts"])


@router.post("/", response_model=CommunityPostResponse, status_code=status.HTTP_201_CREATED)
async def create_community_post(
    post_data: CommunityPostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommunityPost:
    """Publish a short community post."""
    post = CommunityPost(
        user_id=current_user.id,
        title=post_data.title.strip(),
        content=post_data.content,
        media_urls=post_data.media_urls,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


@router.get("/{post_id}", response_model=CommunityPostResponse)
async def get_community_post(post_id: int, db: SessionDep) -> CommunityPost:
    """Get a community post; every fetch counts as a view."""
    if db.get(CommunityPost, post_id) is None:
        raise NotFoundError("Community post not found")

    db.query(CommunityPost).filter(CommunityPost.id == post_id).update(
        {CommunityPost.views: CommunityPost.views + 1},
        synchronize_session=False,
    )
    db.commit()
    post = db.get(CommunityPost, post_id)
    db.refresh(post)
    return post


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_community_post(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, str]:
    post = db.get(CommunityPost, post_id)
    if post is None:
        raise NotFoundError("Community post not found")
    if post.user_id != current_user.id:
        raise PermissionDeniedError("You can only delete your own posts")

    db.query(PostEngagement).filter(
        PostEngagement.content_type == CONTENT_COMMUNITY,
        PostEngagement.post_id == post.id,
    ).delete(synchronize_session=False)
    VoteLedger.clear(db, VOTE_ENTITY_COMMUNITY_POST, [post.id])
    db.delete(post)
    db.commit()
    return {"message": "Community post deleted"}
