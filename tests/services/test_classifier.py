# mypy: ignore-errors
# tests/services/test_classifier.py
import json

import httpx
import pytest

from flokkk.services.ai import CATEGORIES, DEFAULT_CATEGORY, CategoryClassifier, match_category
from flokkk.services.ai.classifier import build_system_prompt, build_user_prompt


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Music", "Music"),
        ("music", "Music"),
        ("Gaming.", "Gaming"),
        ("  Sports and more", "Sports"),
        ("Podcast", "Podcasts"),
        ("Cooking", DEFAULT_CATEGORY),
        ("", DEFAULT_CATEGORY),
        (None, DEFAULT_CATEGORY),
    ],
)
def test_match_category(raw, expected):
    assert match_category(raw) == expected


def test_prompts_mention_every_category():
    system = build_system_prompt()
    user = build_user_prompt("Title here", "Some description")
    for category in CATEGORIES:
        assert f"- {category}:" in system
        assert category in user
    assert "Description: Some description" in user
    assert "Description:" not in build_user_prompt("Title only", None)


def _transport(handler):
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_classify_parses_model_answer():
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"content": [{"type": "text", "text": "Learning"}]})

    classifier = CategoryClassifier(api_key="test-key", transport=_transport(handler))
    result = await classifier.classify("Intro to calculus", "Limits and derivatives")

    assert result.category == "Learning"
    assert result.original_response == "Learning"
    assert seen["headers"]["x-api-key"] == "test-key"
    assert seen["body"]["temperature"] == 0.0
    assert "Title: Intro to calculus" in seen["body"]["messages"][0]["content"]


@pytest.mark.asyncio
async def test_classify_provider_error_falls_back():
    classifier = CategoryClassifier(
        api_key="test-key",
        transport=_transport(lambda request: httpx.Response(529, text="overloaded")),
    )
    result = await classifier.classify("Anything")
    assert result.category == DEFAULT_CATEGORY
    assert result.original_response is None


@pytest.mark.asyncio
async def test_classify_transport_error_falls_back():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    classifier = CategoryClassifier(api_key="test-key", transport=_transport(handler))
    assert (await classifier.classify("Anything")).category == DEFAULT_CATEGORY


@pytest.mark.asyncio
async def test_classify_unknown_answer_keeps_raw_text():
    classifier = CategoryClassifier(
        api_key="test-key",
        transport=_transport(
            lambda request: httpx.Response(200, json={"content": [{"text": "Astrology"}]})
        ),
    )
    result = await classifier.classify("Star signs")
    assert result.category == DEFAULT_CATEGORY
    assert result.original_response == "Astrology"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        ["Music"],
        {"content": ["Music"]},
        {"content": "Music"},
        "Music",
    ],
)
async def test_classify_malformed_payload_falls_back(payload):
    """Test that an oddly shaped success reply still lands on the default category."""
    classifier = CategoryClassifier(
        api_key="test-key",
        transport=_transport(lambda request: httpx.Response(200, json=payload)),
    )
    result = await classifier.classify("Anything")
    assert result.category == DEFAULT_CATEGORY
    assert result.original_response is None


@pytest.mark.asyncio
async def test_classify_empty_content_keeps_default():
    classifier = CategoryClassifier(
        api_key="test-key",
        transport=_transport(lambda request: httpx.Response(200, json={"content": []})),
    )
    result = await classifier.classify("Anything")
    assert result.category == DEFAULT_CATEGORY
    assert result.original_response == ""
