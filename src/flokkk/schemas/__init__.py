"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .common import MessageResponse, Pagination
from .notification import NotificationList, NotificationResponse
from .post import CommunityPostCreate, CommunityPostResponse, PostCreate, PostResponse
from .user import FollowRequest, FollowResponse, UserResponse
from .vote import LinkVoteRequest, VoteRequest, VoteResponse

__all__ = [
    "CommentCreate", "CommentResponse",
    "MessageResponse", "Pagination",
    "NotificationList", "NotificationResponse",
    "CommunityPostCreate", "CommunityPostResponse", "PostCreate", "PostResponse",
    "FollowRequest", "FollowResponse", "UserResponse",
    "LinkVoteRequest", "VoteRequest", "VoteResponse"
]
