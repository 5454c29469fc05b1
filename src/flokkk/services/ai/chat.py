"""AI assistant pipeline: rate limit, community search, optional web search.

Community content is always searched first. A web search only happens when
the user asks for one and still has quota; if the provider fails, the answer
falls back to community content with a note and the request still succeeds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flokkk.core.errors import RateLimitedError
from flokkk.core.settings import settings
from flokkk.models import User
from flokkk.services.ai import formatter
from flokkk.services.ai.cache import WebSearchCache
from flokkk.services.ai.classifier import CategoryClassifier, Classification
from flokkk.services.ai.community_search import CommunityResults, search_community
from flokkk.services.ai.quota import QuotaStatus, WebSearchQuotaService
from flokkk.services.ai.rate_limiter import (
    REQUEST_MANUAL,
    REQUEST_SUGGESTION,
    RateLimiter,
    RateLimitStatus,
)
from flokkk.services.ai.web_search import TavilySearchClient, WebSearchError, WebSearchResult

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """What the assistant returns for one query."""

    response: str
    quota_remaining: int
    theme: str = "dark"
    web_search_used: bool = False
    web_search_failed: bool = False
    web_search_failure_reason: str | None = None
    has_community_content: bool = False
    has_more_options: bool = False
    from_cache: bool = False
    sources: dict[str, Any] = field(default_factory=dict)
    rate_limit: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "response": self.response,
            "quota_remaining": self.quota_remaining,
            "theme": self.theme,
            "web_search_used": self.web_search_used,
            "web_search_failed": self.web_search_failed,
            "web_search_failure_reason": self.web_search_failure_reason,
            "has_community_content": self.has_community_content,
            "has_more_options": self.has_more_options,
            "from_cache": self.from_cache,
            "sources": self.sources,
            "rate_limit": self.rate_limit,
        }


class ChatOrchestrator:
    """Coordinates the limiter, quota, search backends and classifier."""

    def __init__(
        self,
        *,
        rate_limiter: RateLimiter | None = None,
        search_client: TavilySearchClient | None = None,
        cache: WebSearchCache | None = None,
        classifier: CategoryClassifier | None = None,
    ) -> None:
        self.rate_limiter = rate_limiter or RateLimiter()
        self.search_client = search_client or TavilySearchClient()
        self.cache = cache or WebSearchCache()
        self.classifier = classifier or CategoryClassifier()

    def _enforce_rate_limit(self, user: User, request_type: str) -> RateLimitStatus:
        status = self.rate_limiter.check(user.id, request_type)
        if not status.allowed:
            raise RateLimitedError(
                status.message,
                extra={
                    "remaining_requests": status.remaining_requests,
                    "reset_time": status.reset_time.isoformat(),
                },
            )
        return status

    @staticmethod
    def _search_community(db: Session, query: str) -> CommunityResults:
        try:
            return search_community(db, query, limit=settings.community_search_limit)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Community search failed for %r", query)
            return CommunityResults()

    async def handle_user_query(
        self,
        db: Session,
        query: str,
        user: User,
        theme: str = "dark",
        web_search_requested: bool = False,
        request_type: str = REQUEST_MANUAL,
    ) -> ChatResult:
        """Answer ``query`` for ``user``.

        Raises:
            RateLimitedError: If the user exhausted their hourly allowance. No
                backend is called in that case.
        """
        limit_status = self._enforce_rate_limit(user, request_type)
        community = self._search_community(db, query)

        if web_search_requested:
            result = await self._answer_with_web(db, query, user, community)
        else:
            result = self._answer_from_community(db, query, user, community)

        result.theme = theme
        result.rate_limit = limit_status.as_dict()
        return result

    def _answer_from_community(
        self,
        db: Session,
        query: str,
        user: User,
        community: CommunityResults,
    ) -> ChatResult:
        quota = WebSearchQuotaService.check(db, user.id)
        response = formatter.format_community(community, query)
        response += formatter.format_web_search_offer(query, quota.remaining)
        return ChatResult(
            response=response,
            quota_remaining=quota.remaining,
            has_community_content=community.has_content,
            has_more_options=quota.remaining > 0,
            sources={"community": community.as_dict()},
        )

    @staticmethod
    def _quota_exceeded(quota: QuotaStatus, community: CommunityResults) -> ChatResult:
        return ChatResult(
            response=formatter.format_error(
                f"Web search quota exceeded. {quota.remaining} searches remaining today."
            ),
            quota_remaining=quota.remaining,
            web_search_failed=True,
            web_search_failure_reason="quota_exceeded",
            has_community_content=community.has_content,
            sources={"community": community.as_dict()},
        )

    async def _answer_with_web(
        self,
        db: Session,
        query: str,
        user: User,
        community: CommunityResults,
    ) -> ChatResult:
        quota = WebSearchQuotaService.check(db, user.id)
        if not quota.allowed:
            return self._quota_exceeded(quota, community)

        # Quota is spent before the provider call, cached answers included.
        quota = WebSearchQuotaService.consume(db, user.id)
        if not quota.allowed:
            return self._quota_exceeded(quota, community)

        cached = self.cache.get(query)
        if cached is not None:
            web = WebSearchResult.from_cache_payload(query, cached)
        else:
            try:
                web = await self.search_client.search(query)
            except WebSearchError as err:
                logger.warning("Web search failed for %r: %s", query, err)
                return ChatResult(
                    response=(
                        formatter.format_community(community, query)
                        + "\n\n"
                        + formatter.format_error(formatter.WEB_FAILURE_NOTE)
                    ),
                    quota_remaining=quota.remaining,
                    web_search_failed=True,
                    web_search_failure_reason=str(err),
                    has_community_content=community.has_content,
                    sources={"community": community.as_dict()},
                )
            self.cache.set(query, web.to_cache())

        WebSearchQuotaService.notify_if_low(db, user, quota)
        return ChatResult(
            response=formatter.format_web(web),
            quota_remaining=quota.remaining,
            web_search_used=True,
            has_community_content=community.has_content,
            from_cache=web.from_cache,
            sources={"community": community.as_dict(), "web": web.results},
        )

    async def classify(
        self,
        user: User,
        title: str,
        description: str | None = None,
    ) -> Classification:
        """Categorize a post after counting it against the suggestion limit."""
        self._enforce_rate_limit(user, REQUEST_SUGGESTION)
        return await self.classifier.classify(title, description)


def get_chat_orchestrator() -> ChatOrchestrator:
    """Return an orchestrator wired to the configured backends."""
    return ChatOrchestrator()
