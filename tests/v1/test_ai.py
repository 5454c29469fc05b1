# mypy: ignore-errors
# tests/v1/test_ai.py
"""Tests for the AI assistant endpoints."""

from datetime import timedelta

import httpx
from fastapi import status

from flokkk.core.settings import settings
from flokkk.db.time import utctoday
from flokkk.models import Notification, WebSearchQuota
from flokkk.models.notification import NOTIFICATION_QUOTA_WARNING
from flokkk.services.ai import (
    CategoryClassifier,
    RateLimiter,
    TavilySearchClient,
    get_chat_orchestrator,
)
from flokkk.services.ai.cache import WebSearchCache
from flokkk.services.ai.classifier import Classification
from flokkk.services.ai.formatter import WEB_FAILURE_NOTE
from flokkk.services.ai.web_search import WebSearchError, WebSearchResult


class FakeSearchClient:
    """Records queries and returns canned results or raises."""

    def __init__(self, results=None, error=None):
        self.results = results or [{"title": "Moog history", "url": "https://example.com/moog"}]
        self.error = error
        self.queries = []

    async def search(self, query, **kwargs):
        self.queries.append(query)
        if self.error is not None:
            raise WebSearchError(self.error)
        return WebSearchResult(query=query, results=self.results, answer="Synths are great.")


class FakeClassifier:
    def __init__(self, category="Music"):
        self.category = category
        self.calls = []

    async def classify(self, title, description=None):
        self.calls.append((title, description))
        return Classification(category=self.category, original_response=self.category)


def _chat(client, headers, query="synth records", **extra):
    return client.post("/api/v1/ai/chat", json={"query": query, **extra}, headers=headers)


def test_chat_community_answer(client, install_orchestrator, test_post, auth_token):
    """Test that a plain question is answered from community discussions."""
    search = FakeSearchClient()
    install_orchestrator(search_client=search)

    response = _chat(client, auth_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["has_community_content"] is True
    assert data["web_search_used"] is False
    assert data["quota_remaining"] == settings.web_search_daily_limit
    assert data["has_more_options"] is True
    assert "[Best synth records]" in data["response"]
    assert data["sources"]["community"]["posts"][0]["id"] == test_post.id
    assert data["rate_limit"]["used_requests"] == 1
    assert search.queries == []


def test_chat_without_community_content(client, install_orchestrator, auth_token):
    install_orchestrator(search_client=FakeSearchClient())

    data = _chat(client, auth_token, query="underwater basket weaving").json()
    assert data["has_community_content"] is False
    assert "hasn't discussed **underwater basket weaving** yet" in data["response"]


def test_chat_web_search(client, db_session, install_orchestrator, test_user, auth_token):
    """Test that a requested web search uses one search from the daily quota."""
    search = FakeSearchClient()
    install_orchestrator(search_client=search)

    data = _chat(client, auth_token, web_search=True).json()
    assert data["web_search_used"] is True
    assert data["from_cache"] is False
    assert data["quota_remaining"] == settings.web_search_daily_limit - 1
    assert data["sources"]["web"][0]["url"] == "https://example.com/moog"
    assert "Synths are great." in data["response"]
    assert search.queries == ["synth records"]

    quota = db_session.get(WebSearchQuota, test_user.id)
    db_session.refresh(quota)
    assert quota.daily_searches == 1
    assert quota.total_searches == 1


def test_repeat_web_search_is_cached(client, install_orchestrator, auth_token):
    """Test that a repeated query is served from the cache but still costs quota."""
    search = FakeSearchClient()
    install_orchestrator(search_client=search)

    _chat(client, auth_token, web_search=True)
    second = _chat(client, auth_token, query="Synth Records", web_search=True).json()

    assert second["from_cache"] is True
    assert second["quota_remaining"] == settings.web_search_daily_limit - 2
    assert search.queries == ["synth records"]


def test_web_failure_falls_back_to_community(client, install_orchestrator, test_post, auth_token):
    """Test that a provider failure still answers from the community, with a note."""
    install_orchestrator(search_client=FakeSearchClient(error="Tavily API error: 502 - bad gateway"))

    response = _chat(client, auth_token, web_search=True)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["web_search_used"] is False
    assert data["web_search_failed"] is True
    assert data["web_search_failure_reason"] == "Tavily API error: 502 - bad gateway"
    assert WEB_FAILURE_NOTE in data["response"]
    assert "[Best synth records]" in data["response"]


def test_web_search_quota_exceeded(client, db_session, install_orchestrator, test_user, auth_token):
    """Test that an exhausted quota skips the provider entirely."""
    db_session.add(
        WebSearchQuota(
            user_id=test_user.id,
            daily_limit=3,
            daily_searches=3,
            last_reset_date=utctoday(),
            total_searches=40,
        )
    )
    db_session.flush()
    search = FakeSearchClient()
    install_orchestrator(search_client=search)

    data = _chat(client, auth_token, web_search=True).json()
    assert data["web_search_failed"] is True
    assert data["web_search_failure_reason"] == "quota_exceeded"
    assert data["quota_remaining"] == 0
    assert search.queries == []


def test_quota_resets_on_a_new_day(client, db_session, install_orchestrator, test_user, auth_token):
    db_session.add(
        WebSearchQuota(
            user_id=test_user.id,
            daily_limit=3,
            daily_searches=3,
            last_reset_date=utctoday() - timedelta(days=1),
            total_searches=3,
        )
    )
    db_session.flush()
    install_orchestrator(search_client=FakeSearchClient())

    data = _chat(client, auth_token, web_search=True).json()
    assert data["web_search_used"] is True
    assert data["quota_remaining"] == 2


def test_low_quota_warning_sent_once(client, db_session, install_orchestrator, test_user, auth_token):
    """Test that crossing the warning threshold notifies the user once per day."""
    db_session.add(
        WebSearchQuota(
            user_id=test_user.id,
            daily_limit=10,
            daily_searches=5,
            last_reset_date=utctoday(),
            total_searches=5,
        )
    )
    db_session.flush()
    install_orchestrator(search_client=FakeSearchClient())

    _chat(client, auth_token, query="first question", web_search=True)
    _chat(client, auth_token, query="second question", web_search=True)

    warnings = (
        db_session.query(Notification)
        .filter(Notification.user_id == test_user.id, Notification.type == NOTIFICATION_QUOTA_WARNING)
        .all()
    )
    assert [n.content for n in warnings] == ["You have 4 web searches remaining today."]
    assert warnings[0].sender_id is None


def test_chat_rate_limited(client, install_orchestrator, auth_token, monkeypatch, mocker):
    """Test that the request over the limit is a 429 and touches no backend."""
    monkeypatch.setattr(settings, "ai_rate_limit_manual", 2)
    search = FakeSearchClient()
    install_orchestrator(search_client=search)

    assert _chat(client, auth_token).status_code == status.HTTP_200_OK
    assert _chat(client, auth_token).status_code == status.HTTP_200_OK

    community_search = mocker.patch("flokkk.services.ai.chat.search_community")
    response = _chat(client, auth_token, web_search=True)
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    body = response.json()
    assert body["message"].startswith("Rate limit exceeded. You can make 2 manual requests per hour.")
    assert body["remaining_requests"] == 0
    assert "reset_time" in body
    community_search.assert_not_called()
    assert search.queries == []


def test_rate_limits_are_per_user(client, install_orchestrator, auth_token, other_auth_token, monkeypatch):
    monkeypatch.setattr(settings, "ai_rate_limit_manual", 1)
    install_orchestrator(search_client=FakeSearchClient())

    assert _chat(client, auth_token).status_code == status.HTTP_200_OK
    assert _chat(client, other_auth_token).status_code == status.HTTP_200_OK
    assert _chat(client, auth_token).status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_chat_requires_auth(client, install_orchestrator):
    install_orchestrator()
    response = client.post("/api/v1/ai/chat", json={"query": "hello"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_classify(client, install_orchestrator, auth_token):
    classifier = FakeClassifier("Gaming")
    install_orchestrator(classifier=classifier)

    response = client.post(
        "/api/v1/ai/classify",
        json={"title": "Speedrunning tips", "description": "Frame-perfect tricks"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"category": "Gaming", "original_response": "Gaming"}
    assert classifier.calls == [("Speedrunning tips", "Frame-perfect tricks")]


def test_classify_without_provider_falls_back(client, install_orchestrator, auth_token):
    """Test that an unconfigured classifier answers with the default category."""
    install_orchestrator()

    response = client.post("/api/v1/ai/classify", json={"title": "Anything"}, headers=auth_token)
    assert response.json() == {"category": "Trending", "original_response": None}


def test_classify_missing_title(client, install_orchestrator, auth_token):
    install_orchestrator(classifier=FakeClassifier())
    response = client.post("/api/v1/ai/classify", json={"title": "  "}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Missing title"


def test_classify_counts_against_suggestion_limit(client, install_orchestrator, auth_token, monkeypatch):
    monkeypatch.setattr(settings, "ai_rate_limit_suggestion", 1)
    classifier = FakeClassifier()
    install_orchestrator(classifier=classifier)

    client.post("/api/v1/ai/classify", json={"title": "One"}, headers=auth_token)
    response = client.post("/api/v1/ai/classify", json={"title": "Two"}, headers=auth_token)

    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert classifier.calls == [("One", None)]


def test_status(client, install_orchestrator, test_user, auth_token):
    install_orchestrator()
    _chat(client, auth_token)

    response = client.get("/api/v1/ai/status", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["user_id"] == test_user.id
    assert data["services"]["classifier"]["model"] == settings.classifier_model
    assert data["rate_limits"]["manual"]["used_requests"] == 1
    assert data["rate_limits"]["suggestion"]["used_requests"] == 0
    assert data["web_search_quota"]["remaining"] == settings.web_search_daily_limit


def test_classify_malformed_provider_reply(client, install_orchestrator, auth_token):
    """Test that a success reply with a non-object content block still answers Trending."""
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"content": ["Music"]}))
    install_orchestrator(classifier=CategoryClassifier(api_key="test-key", transport=transport))

    response = client.post("/api/v1/ai/classify", json={"title": "Anything"}, headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["category"] == "Trending"


def test_default_orchestrator_builds_its_backends():
    orchestrator = get_chat_orchestrator()
    assert isinstance(orchestrator.rate_limiter, RateLimiter)
    assert isinstance(orchestrator.search_client, TavilySearchClient)
    assert isinstance(orchestrator.cache, WebSearchCache)
    assert isinstance(orchestrator.classifier, CategoryClassifier)
