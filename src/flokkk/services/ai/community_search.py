"""Keyword search over community discussions and their links."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from flokkk.models import CommunityLink, CreatorLink, Post, User

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
        "by", "is", "are", "was", "were", "be", "been", "have", "has", "had", "do", "does",
        "did", "will", "would", "could", "should", "this", "that", "these", "those",
    }
)
MAX_KEYWORDS = 8
SNIPPET_LENGTH = 200

_PUNCTUATION = re.compile(r"[^\w\s]")


def extract_keywords(query: str) -> list[str]:
    """Return up to eight search terms: significant words, then adjacent word pairs."""
    words = [
        word
        for word in _PUNCTUATION.sub("", query.lower()).split()
        if len(word) > 2 and word not in STOP_WORDS
    ]
    phrases = [f"{first} {second}" for first, second in zip(words, words[1:])]
    # dict preserves first-seen order while dropping duplicates
    return list(dict.fromkeys(words + phrases))[:MAX_KEYWORDS]


@dataclass
class CommunityResults:
    posts: list[dict[str, Any]] = field(default_factory=list)
    links: list[dict[str, Any]] = field(default_factory=list)

    @property
    def has_content(self) -> bool:
        return bool(self.posts or self.links)

    def as_dict(self) -> dict[str, Any]:
        return {"posts": self.posts, "links": self.links}


def _snippet(text: str | None) -> str:
    text = text or ""
    if len(text) <= SNIPPET_LENGTH:
        return text
    return text[:SNIPPET_LENGTH] + "..."


def search_community(db: Session, query: str, limit: int = 10) -> CommunityResults:
    """Find discussions and links mentioning the query or its keywords."""
    terms = extract_keywords(query) or [query.strip()]
    terms = [term for term in terms if term]
    if not terms:
        return CommunityResults()

    post_filters = [
        condition
        for term in terms
        for condition in (Post.title.ilike(f"%{term}%"), Post.content.ilike(f"%{term}%"))
    ]
    posts = (
        db.query(Post, User.username)
        .join(User, User.id == Post.user_id)
        .filter(or_(*post_filters))
        .order_by(Post.created_at.desc())
        .limit(limit)
        .all()
    )
    post_results = [
        {
            "id": post.id,
            "title": post.title,
            "content": _snippet(post.content),
            "username": username,
            "hashtags": post.hashtags or [],
            "discussions": post.discussions,
            "link_count": len(post.creator_links) + len(post.community_links),
        }
        for post, username in posts
    ]

    link_results: list[dict[str, Any]] = []
    for model, link_type in ((CreatorLink, "creator"), (CommunityLink, "community")):
        link_filters = [
            condition
            for term in terms
            for condition in (
                model.title.ilike(f"%{term}%"),
                model.description.ilike(f"%{term}%"),
                model.url.ilike(f"%{term}%"),
            )
        ]
        rows = (
            db.query(model, Post.title)
            .join(Post, Post.id == model.post_id)
            .filter(or_(*link_filters))
            .order_by(model.vote_count.desc())
            .limit(limit)
            .all()
        )
        link_results.extend(
            {
                "post_id": link.post_id,
                "post_title": post_title,
                "link_type": link_type,
                "title": link.title,
                "url": link.url,
                "description": link.description or "",
                "votes": link.vote_count,
            }
            for link, post_title in rows
        )

    link_results.sort(key=lambda item: item["votes"], reverse=True)
    return CommunityResults(posts=post_results, links=link_results[:limit])
