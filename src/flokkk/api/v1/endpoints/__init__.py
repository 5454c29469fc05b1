# src/flokkk/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .ai import router as ai_router
from .comments import router as comments_router
from .community_posts import router as community_posts_router
from .contributions import router as contributions_router
from .engagement import router as engagement_router
from .history import router as history_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .studio import router as studio_router
from .users import router as users_router
from .votes import router as votes_router

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
