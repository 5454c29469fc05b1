# src/flokkk/api/v1/endpoints/comments.py
"""Threaded comments on discussions."""

from typing import Any

from fastapi import APIRouter, status
from sqlalchemy.orm import Session

from flokkk.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from flokkk.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from flokkk.db.time import as_utc
from flokkk.models import Comment, Post, Vote
from flokkk.models.notification import NOTIFICATION_REPLY, ON_MODEL_POST
from flokkk.models.vote import VOTE_ENTITY_COMMENT
from flokkk.schemas import CommentCreate, CommentResponse, MessageResponse
from flokkk.services import NotificationEmitter, VoteLedger

from .posts import get_post_or_404

router = APIRouter(tags=["comments"])


def sanitize_content(content: str) -> str:
    """Turn non-breaking spaces into plain spaces and trim."""
    return content.replace("&nbsp;", " ").replace("\u00a0", " ").strip()


def _get_thread_comment(db: Session, comment_id: int, post_id: int, label: str) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None or comment.post_id != post_id:
        raise NotFoundError(f"{label} not found")
    return comment


def _serialize(comment: Comment, user_vote: int) -> dict[str, Any]:
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "parent_id": comment.parent_id,
        "reply_to_id": comment.reply_to_id,
        "reply_to_username": comment.reply_to_username,
        "user_id": comment.user_id,
        "username": comment.username,
        "content": comment.content,
        "likes": comment.likes,
        "level": comment.level,
        "created_at": comment.created_at,
        "user_vote": user_vote,
        "replies": [],
    }


def build_comment_tree(comments: list[Comment], votes: dict[int, int]) -> list[dict[str, Any]]:
    """Nest comments under their parents.

    Top-level comments come newest first; replies are ordered by likes, then
    oldest first.
    """
    nodes = {comment.id: _serialize(comment, votes.get(comment.id, 0)) for comment in comments}
    roots: list[dict[str, Any]] = []
    for comment in comments:
        node = nodes[comment.id]
        parent = nodes.get(comment.parent_id) if comment.parent_id is not None else None
        if parent is None:
            roots.append(node)
        else:
            parent["replies"].append(node)

    for node in nodes.values():
        node["replies"].sort(
            key=lambda reply: (-reply["likes"], as_utc(reply["created_at"]), reply["id"])
        )
    roots.sort(key=lambda root: (as_utc(root["created_at"]), root["id"]), reverse=True)
    return roots


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    post_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> list[dict[str, Any]]:
    """Return the comment tree for a discussion."""
    post = get_post_or_404(db, post_id)
    comments = db.query(Comment).filter(Comment.post_id == post.id).all()
    votes: dict[int, int] = {}
    if viewer is not None:
        votes = VoteLedger.votes_for(
            db, VOTE_ENTITY_COMMENT, (comment.id for comment in comments), viewer.id
        )
    return build_comment_tree(comments, votes)


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Add a comment or reply to a discussion.

    The author's upvote is recorded with the comment, so it starts with one
    like. The parent's author and the discussion owner are told about it,
    each at most once.

    Raises:
        ValidationError: If the content is empty after sanitizing
        NotFoundError: If the post, parent or replied-to comment does not exist
    """
    content = sanitize_content(comment_data.content)
    if not content:
        raise ValidationError("Comment content is required")

    post = get_post_or_404(db, post_id)

    parent: Comment | None = None
    if comment_data.parent_id is not None:
        parent = _get_thread_comment(db, comment_data.parent_id, post.id, "Parent comment")
    reply_to: Comment | None = None
    if comment_data.reply_to_id is not None:
        reply_to = _get_thread_comment(db, comment_data.reply_to_id, post.id, "Comment")

    comment = Comment(
        post_id=post.id,
        parent_id=parent.id if parent is not None else None,
        reply_to_id=reply_to.id if reply_to is not None else None,
        reply_to_username=reply_to.username if reply_to is not None else None,
        user_id=current_user.id,
        username=current_user.username,
        content=content,
        likes=1,
        level=parent.level + 1 if parent is not None else 0,
    )
    db.add(comment)
    db.flush()
    db.add(
        Vote(
            entity_type=VOTE_ENTITY_COMMENT,
            entity_id=comment.id,
            user_id=current_user.id,
            value=1,
        )
    )
    db.query(Post).filter(Post.id == post.id).update(
        {Post.discussions: Post.discussions + 1},
        synchronize_session=False,
    )
    db.commit()
    db.refresh(comment)

    notified: set[int] = set()
    if parent is not None and parent.user_id != current_user.id:
        NotificationEmitter.emit(
            db,
            recipient_id=parent.user_id,
            type=NOTIFICATION_REPLY,
            content=f'{current_user.username} replied to your comment on "{post.title}"',
            sender=current_user,
            related_id=post.id,
            on_model=ON_MODEL_POST,
        )
        notified.add(parent.user_id)
    if post.user_id not in notified:
        NotificationEmitter.emit(
            db,
            recipient_id=post.user_id,
            type=NOTIFICATION_REPLY,
            content=f'{current_user.username} commented on your discussion: "{post.title}"',
            sender=current_user,
            related_id=post.id,
            on_model=ON_MODEL_POST,
        )

    return _serialize(comment, 1)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, str]:
    """Delete a comment together with every reply beneath it.

    Raises:
        NotFoundError: If the comment does not exist
        PermissionDeniedError: If the caller did not write the comment
    """
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    if comment.user_id != current_user.id:
        raise PermissionDeniedError("You can only delete your own comments")

    thread_ids = [comment.id]
    frontier = [comment.id]
    while frontier:
        children = [
            row.id for row in db.query(Comment.id).filter(Comment.parent_id.in_(frontier))
        ]
        thread_ids.extend(children)
        frontier = children

    VoteLedger.clear(db, VOTE_ENTITY_COMMENT, thread_ids)
    db.query(Comment).filter(Comment.reply_to_id.in_(thread_ids)).update(
        {Comment.reply_to_id: None},
        synchronize_session=False,
    )
    db.query(Comment).filter(Comment.id.in_(thread_ids)).delete(synchronize_session=False)
    db.query(Post).filter(Post.id == comment.post_id).update(
        {Post.discussions: Post.discussions - len(thread_ids)},
        synchronize_session=False,
    )
    db.expunge(comment)
    db.commit()
    return {"message": "Comment deleted"}
