# src/flokkk/schemas/post.py
"""Discussion and community post schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNTITLED_LINK = "Untitled Link"


def normalize_url(url: str) -> str:
    """Prefix scheme-less URLs with https://."""
    url = url.strip()
    if url and not url.lower().startswith(("http://", "https://")):
        return f"https://{url}"
    return url


class LinkInput(BaseModel):
    """A link supplied by the post owner."""

    title: str | None = Field(None, max_length=300)
    url: str = Field(..., min_length=1)
    description: str | None = None

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return normalize_url(value)

    @field_validator("title")
    @classmethod
    def _default_title(cls, value: str | None) -> str:
        value = (value or "").strip()
        return value or UNTITLED_LINK


class PostCreate(BaseModel):
    """Schema for creating a new discussion."""

    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field("", max_length=20000)
    category: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    media_urls: list[str] = Field(default_factory=list)
    creator_links: list[LinkInput] = Field(default_factory=list)
    allow_contributions: bool = True


class LinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position: int
    title: str
    url: str
    description: str | None = None
    vote_count: int
    contributor_id: int | None = None
    user_vote: int = 0


class PostResponse(BaseModel):
    """Schema for discussion information returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    username: str | None = None
    title: str
    content: str
    category: str | None
    hashtags: list[str]
    media_urls: list[str]
    allow_contributions: bool
    discussions: int
    shares: int
    created_at: datetime
    creator_links: list[LinkResponse] = Field(default_factory=list)
    community_links: list[LinkResponse] = Field(default_factory=list)


class PostList(BaseModel):
    posts: list[PostResponse]
    page: int
    limit: int
    total: int


class CommunityPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field("", max_length=5000)
    media_urls: list[str] = Field(default_factory=list)


class CommunityPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    content: str
    media_urls: list[str]
    views: int
    vote_count: int
    created_at: datetime
