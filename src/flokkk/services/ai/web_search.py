"""Tavily web search client."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from flokkk.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_OK = 200


class WebSearchError(RuntimeError):
    """Raised when the search provider cannot answer."""


@dataclass
class WebSearchResult:
    """Results returned by the provider (or the cache)."""

    query: str
    results: list[dict[str, Any]] = field(default_factory=list)
    answer: str | None = None
    from_cache: bool = False

    def to_cache(self) -> dict[str, Any]:
        return {"results": self.results, "answer": self.answer}

    @classmethod
    def from_cache_payload(cls, query: str, payload: dict[str, Any]) -> WebSearchResult:
        return cls(
            query=query,
            results=list(payload.get("results") or []),
            answer=payload.get("answer"),
            from_cache=True,
        )


class TavilySearchClient:
    """Thin async wrapper around the Tavily search endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.tavily_api_key
        self.base_url = base_url or settings.tavily_api_url
        self.timeout = timeout if timeout is not None else settings.web_search_timeout_seconds
        self._transport = transport

    async def search(
        self,
        query: str,
        *,
        max_results: int | None = None,
        include_images: bool = False,
    ) -> WebSearchResult:
        """Run one search.

        Raises:
            WebSearchError: On a missing key, a transport error or a non-200 reply.
        """
        if not self.api_key:
            raise WebSearchError("Tavily API key is not configured")

        payload = {
            "query": query,
            "search_depth": "basic",
            "include_images": include_images,
            "include_answer": True,
            "max_results": max_results or settings.web_search_max_results,
            "include_domains": [],
            "exclude_domains": [],
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.base_url, json=payload, headers=headers)
        except httpx.HTTPError as err:
            raise WebSearchError(f"Web search failed: {err}") from err

        if response.status_code != HTTP_OK:
            raise WebSearchError(f"Tavily API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as err:
            raise WebSearchError("Tavily returned a non-JSON response") from err
        if not isinstance(data, dict):
            raise WebSearchError("Tavily returned an unexpected payload")

        results = data.get("results") or []
        if not results:
            logger.warning("Tavily returned no results for query %r", query)
        return WebSearchResult(query=query, results=results, answer=data.get("answer"))
