"""User and follow schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """Public profile information."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    is_verified: bool
    discussions: int
    subscribers: int
    created_at: datetime


class FollowRequest(BaseModel):
    action: Literal["follow", "unfollow"] = Field("follow", description="Follow or unfollow")


class FollowResponse(BaseModel):
    message: str
    is_following: bool
    follower_count: int


class FollowStatus(BaseModel):
    is_following: bool


class UserStats(BaseModel):
    followers: int
    following: int
    is_following: bool
    discussions: int
