"""Creator studio schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

StudioContentType = Literal["all", "discussion", "community"]


class StudioPost(BaseModel):
    id: int
    title: str
    type: Literal["discussion", "community"]
    created_at: datetime
    appeared: int
    viewed: int
    penetrated: int
    saved: int
    shared: int
    comments: int
    community_links: int
    engagement_rate: float


class StudioMetricsResponse(BaseModel):
    total_posts: int
    discussions: int
    community_posts: int
    appeared: int
    viewed: int
    penetrated: int
    saved: int
    shared: int
    comments: int
    community_links: int
    engagement_rate: float
    top_posts: list[StudioPost]


class StudioPostList(BaseModel):
    posts: list[StudioPost]
    page: int
    limit: int
    total: int


class StudioPostUpdate(BaseModel):
    """Fields left out are not changed."""

    content_type: Literal["discussion", "community"] | None = None
    title: str | None = Field(None, min_length=1, max_length=300)
    content: str | None = Field(None, max_length=20000)
    hashtags: list[str] | None = None


class StudioEditedPost(BaseModel):
    id: int
    type: Literal["discussion", "community"]
    title: str
    content: str
    hashtags: list[str]
    created_at: datetime


class StudioPostUpdateResponse(BaseModel):
    message: str
    post: StudioEditedPost
