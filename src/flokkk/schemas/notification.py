"""Notification feed schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from .common import Pagination

NotificationFilter = Literal["all", "unread", "posts", "comments", "likes", "contributions"]
ReadAllFilter = Literal["posts", "comments", "likes", "contributions"]


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    content: str
    sender_id: int | None
    sender_username: str | None
    related_id: int | None
    on_model: str | None
    thumbnail: str | None
    read: bool
    created_at: datetime


class NotificationCounts(BaseModel):
    all: int = 0
    unread: int = 0
    comments: int = 0
    likes: int = 0
    posts: int = 0
    contributions: int = 0
    comments_unread: int = 0
    likes_unread: int = 0
    posts_unread: int = 0
    contributions_unread: int = 0


class NotificationList(BaseModel):
    notifications: list[NotificationResponse]
    pagination: Pagination
    counts: NotificationCounts


class NotificationUpdate(BaseModel):
    read: bool = True


class ReadAllRequest(BaseModel):
    type: ReadAllFilter | None = None


class ReadAllResponse(BaseModel):
    message: str
    count: int
