"""Engagement tracking schemas."""

from pydantic import BaseModel


class EngagementFlags(BaseModel):
    has_appeared: bool
    has_viewed: bool
    has_penetrated: bool
    has_saved: bool
    has_shared: bool


class EngagementCounts(BaseModel):
    appeared: int
    viewed: int
    penetrated: int
    saved: int
    shared: int


class EngagementResponse(BaseModel):
    message: str
    engagement: EngagementFlags
    counts: EngagementCounts
