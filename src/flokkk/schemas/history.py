"""Recently viewed history schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class TrackViewRequest(BaseModel):
    post_id: int = Field(..., ge=1)


class HistoryAuthor(BaseModel):
    username: str
    avatar_url: str | None = None


class HistoryItem(BaseModel):
    id: int
    title: str
    description: str
    thumbnail: str | None = None
    author: HistoryAuthor
    discussion_count: int
    posted_at: datetime
    viewed_at: datetime


class HistoryList(BaseModel):
    items: list[HistoryItem]
    count: int


class ClearHistoryResponse(BaseModel):
    message: str
    cleared: bool
