"""Content category classifier backed by the Anthropic Messages API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from flokkk.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_OK = 200
DEFAULT_CATEGORY = "Trending"

CATEGORY_DEFINITIONS: dict[str, dict[str, Any]] = {
    "Trending": {
        "description": (
            "Popular or viral content with high engagement that doesn't fit other categories"
        ),
        "examples": [
            "What Everyone Is Talking About Today",
            "The Latest Internet Sensation",
            "10 Things Going Viral This Week",
        ],
    },
    "Music": {
        "description": (
            "Content about songs, albums, artists, concerts, musical instruments, "
            "or the music industry"
        ),
        "examples": [
            "New Album Review: Taylor Swift's Latest Release",
            "Top 10 Guitar Solos of All Time",
            "How to Start Your Music Production Career",
        ],
    },
    "Gaming": {
        "description": (
            "Content about video games, gaming hardware, esports, streamers, "
            "or game development"
        ),
        "examples": [
            "Elden Ring DLC Announcement Details",
            "Best Budget Gaming PCs in 2024",
            "How Pro Gamers Train for Tournaments",
        ],
    },
    "Movies": {
        "description": "Content about films, cinema, actors, directors, or the film industry",
        "examples": [
            "Marvel Announces Next Phase of Superhero Films",
            "Oscar Nominations Breakdown",
            "Review: The Latest Christopher Nolan Film",
        ],
    },
    "News": {
        "description": "Current events, politics, world affairs, breaking stories, or journalism",
        "examples": [
            "Breaking: Election Results Announced",
            "Economic Impact of New Trade Deal",
            "Climate Summit Reaches Historic Agreement",
        ],
    },
    "Sports": {
        "description": (
            "Athletic competitions, teams, players, sporting events, or physical activities"
        ),
        "examples": [
            "NBA Finals Game 7 Recap",
            "Olympic Medal Count Update",
            "How to Improve Your Tennis Serve",
        ],
    },
    "Learning": {
        "description": (
            "Educational content, tutorials, courses, academic subjects, or skill development"
        ),
        "examples": [
            "Complete Guide to Machine Learning Algorithms",
            "How to Learn a New Language in 3 Months",
            "Understanding Quantum Physics Basics",
        ],
    },
    "Fashion": {
        "description": "Clothing, style trends, designers, models, or the fashion industry",
        "examples": [
            "Summer Fashion Trends for 2024",
            "Sustainable Clothing Brands to Support",
            "Paris Fashion Week Highlights",
        ],
    },
    "Podcasts": {
        "description": "Audio shows, podcast episodes, podcast hosts, or podcast platforms",
        "examples": [
            "Best True Crime Podcasts to Binge",
            "Interview with Joe Rogan on Podcast Success",
            "How to Start Your First Podcast",
        ],
    },
    "Lifestyle": {
        "description": (
            "Daily living, wellness, health, home, food, travel, or personal development"
        ),
        "examples": [
            "30-Day Meditation Challenge Results",
            "Best Destinations for Digital Nomads",
            "Simple Meal Prep Ideas for Busy Professionals",
        ],
    },
}

CATEGORIES: tuple[str, ...] = tuple(CATEGORY_DEFINITIONS)


def build_system_prompt(categories: tuple[str, ...] = CATEGORIES) -> str:
    """Return the categorization instructions with a guide for each category."""
    guide = []
    for name in categories:
        definition = CATEGORY_DEFINITIONS[name]
        examples = "\n  * ".join(f"Title: {example}" for example in definition["examples"])
        guide.append(f"- {name}: {definition['description']}\n  Examples:\n  * {examples}")
    return (
        "You are a precise content categorization AI that analyzes post titles and "
        "descriptions to assign exactly ONE category that best represents the content's "
        "subject matter.\n\n"
        "DETAILED CATEGORY GUIDE:\n"
        + "\n\n".join(guide)
        + "\n\nCATEGORIZATION RULES:\n"
        "1. Analyze the COMPLETE title and description.\n"
        "2. Focus on the PRIMARY subject matter of the content.\n"
        "3. If content fits multiple categories, select the one that best represents "
        "the primary focus.\n"
        '4. Use "Trending" ONLY if the content truly doesn\'t fit any other category.\n\n'
        "Your response must ONLY contain the single category name, with no other text."
    )


def build_user_prompt(title: str, description: str | None) -> str:
    lines = [
        "I need you to analyze this post and categorize it:",
        "",
        f"Title: {title}",
    ]
    if description:
        lines.append(f"Description: {description}")
    lines.append("")
    lines.append(
        "What is the ONE most appropriate category for this content? "
        f"Choose from: {', '.join(CATEGORIES)}"
    )
    return "\n".join(lines)


def match_category(raw: str | None, categories: tuple[str, ...] = CATEGORIES) -> str:
    """Map a model answer onto a known category.

    Tries an exact match on the first token, then a case-insensitive match,
    then a substring match in either direction, then falls back to
    ``DEFAULT_CATEGORY``.
    """
    tokens = (raw or "").strip().split()
    cleaned = tokens[0].strip(".,:;!\"'") if tokens else ""
    if not cleaned:
        return DEFAULT_CATEGORY

    if cleaned in categories:
        return cleaned

    lowered = cleaned.lower()
    for category in categories:
        if category.lower() == lowered:
            return category

    for category in categories:
        name = category.lower()
        if name in lowered or lowered in name:
            return category

    return DEFAULT_CATEGORY


@dataclass(frozen=True)
class Classification:
    category: str
    original_response: str | None


class ClassifierError(RuntimeError):
    """Raised when the model provider cannot answer."""


class CategoryClassifier:
    """Classify a title and description into one of ``CATEGORIES``."""

    def __init__(
        self,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self._transport = transport

    async def _complete(self, title: str, description: str | None) -> str:
        if not self.api_key:
            raise ClassifierError("Anthropic API key is not configured")

        body = {
            "model": settings.classifier_model,
            "system": build_system_prompt(),
            "messages": [{"role": "user", "content": build_user_prompt(title, description)}],
            "max_tokens": settings.classifier_max_tokens,
            "temperature": 0.0,
        }
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": settings.anthropic_version,
        }
        try:
            async with httpx.AsyncClient(
                timeout=settings.classifier_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(settings.anthropic_api_url, json=body, headers=headers)
        except httpx.HTTPError as err:
            raise ClassifierError(f"Classifier request failed: {err}") from err

        if response.status_code != HTTP_OK:
            raise ClassifierError(f"Anthropic API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as err:
            raise ClassifierError("Anthropic returned a non-JSON response") from err
        if not isinstance(data, dict):
            raise ClassifierError("Anthropic returned an unexpected payload")

        content = data.get("content") or []
        if not content:
            return ""
        if not isinstance(content, list) or not isinstance(content[0], dict):
            raise ClassifierError("Anthropic returned an unexpected content block")
        return str(content[0].get("text", ""))

    async def classify(self, title: str, description: str | None = None) -> Classification:
        """Return the best category; provider failures yield ``DEFAULT_CATEGORY``."""
        try:
            raw = await self._complete(title, description)
        except ClassifierError:
            logger.exception("Category classification failed for %r", title)
            return Classification(category=DEFAULT_CATEGORY, original_response=None)
        return Classification(category=match_category(raw), original_response=raw)
