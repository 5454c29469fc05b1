# src/flokkk/schemas/vote.py
"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field


class VoteRequest(BaseModel):
    """Vote on a comment."""

    vote: int = Field(..., description="1 for upvote, -1 for downvote, 0 to remove")


class LinkVoteRequest(BaseModel):
    """Vote on a creator or community link of a discussion."""

    link_index: int = Field(..., ge=0, description="Position of the link in its list")
    vote: int = Field(..., description="1 for upvote, -1 for downvote, 0 to remove")


class VoteResponse(BaseModel):
    """Envelope shared by every vote endpoint."""

    vote_count: int
    user_vote: int
    is_liked: bool
    is_downvoted: bool
