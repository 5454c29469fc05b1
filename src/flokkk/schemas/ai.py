"""AI assistant schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=2000)
    theme: str = "dark"
    web_search: bool = False
    request_type: Literal["manual", "suggestion"] = "manual"


class ChatResponse(BaseModel):
    response: str
    quota_remaining: int
    theme: str
    web_search_used: bool
    web_search_failed: bool
    web_search_failure_reason: str | None = None
    has_community_content: bool
    has_more_options: bool
    from_cache: bool
    sources: dict[str, Any]
    rate_limit: dict[str, Any] | None = None


class ClassifyRequest(BaseModel):
    title: str | None = None
    description: str | None = None


class ClassifyResponse(BaseModel):
    category: str
    original_response: str | None
