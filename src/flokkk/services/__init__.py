"""Business logic services for the flokkk application."""

from .engagement import EngagementTracker
from .history import RecentlyViewedService
from .notifications import NotificationEmitter
from .studio import StudioService
from .votes import VoteLedger, VoteTarget

__all__ = [
    "EngagementTracker",
    "RecentlyViewedService",
    "NotificationEmitter",
    "StudioService",
    "VoteLedger", "VoteTarget"
]
