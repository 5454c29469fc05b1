"""Comment schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    content: str = Field(..., max_length=10000)
    parent_id: int | None = None
    reply_to_id: int | None = None


class CommentResponse(BaseModel):
    """A comment with its nested replies."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    parent_id: int | None
    reply_to_id: int | None
    reply_to_username: str | None
    user_id: int
    username: str
    content: str
    likes: int
    level: int
    created_at: datetime
    user_vote: int = 0
    replies: list[CommentResponse] = Field(default_factory=list)
