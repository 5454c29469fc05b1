"""Link contribution schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .post import normalize_url


class ContributionCreate(BaseModel):
    post_id: int
    title: str = Field(..., min_length=1, max_length=300)
    url: str = Field(..., min_length=1)
    description: str | None = None

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return normalize_url(value)


class ContributionAction(BaseModel):
    action: Literal["approve", "reject"]


class ContributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    post_title: str | None = None
    contributor_id: int
    contributor_username: str | None = None
    creator_id: int
    title: str
    url: str
    description: str | None
    status: Literal["pending", "approved", "declined"]
    created_at: datetime
    resolved_at: datetime | None = None
