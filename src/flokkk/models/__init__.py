# src/flokkk/models/__init__.py
"""SQLAlchemy models for the flokkk application."""

from .comment import Comment
from .community_post import CommunityPost
from .contribution import LinkContribution
from .engagement import PostEngagement
from .history import RecentlyViewed
from .notification import Notification
from .post import CommunityLink, CreatorLink, Post
from .rate import WebSearchQuota
from .user import Follow, User
from .vote import Vote

__all__ = [
    "Comment",
    "CommunityPost",
    "LinkContribution",
    "PostEngagement",
    "RecentlyViewed",
    "Notification",
    "Post", "CreatorLink", "CommunityLink",
    "WebSearchQuota",
    "User", "Follow",
    "Vote"
]
