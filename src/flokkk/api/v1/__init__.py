# src/flokkk/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    ai_router,
    comments_router,
    community_posts_router,
    contributions_router,
    engagement_router,
    history_router,
    notifications_router,
    posts_router,
    studio_router,
    users_router,
    votes_router,
)

__all__ = [
    "ai_router",
    "comments_router",
    "community_posts_router",
    "contributions_router",
    "engagement_router",
    "history_router",
    "notifications_router",
    "posts_router",
    "studio_router",
    "users_router",
    "votes_router",
]
