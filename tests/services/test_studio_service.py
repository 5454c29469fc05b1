# mypy: ignore-errors
# tests/services/test_studio_service.py
import pytest

from flokkk.models import Comment
from flokkk.services import EngagementTracker, StudioService
from flokkk.services.studio import engagement_rate


def test_engagement_rate_zero_appearances():
    assert engagement_rate(appeared=0, penetrated=4, saved=1, shared=0, comments=3, community_links=0) == 0.0


def test_engagement_rate_rounds():
    assert engagement_rate(appeared=3, penetrated=1, saved=0, shared=0, comments=0, community_links=0) == 33.33


def test_metrics_include_comments_and_links(db_session, test_post, community_link, test_user, other_user):
    db_session.add(
        Comment(post_id=test_post.id, user_id=other_user.id, username="bob", content="Hi", likes=1)
    )
    db_session.flush()
    EngagementTracker.track(db_session, "discussion", test_post.id, other_user.id, "appeared")
    EngagementTracker.track(db_session, "discussion", test_post.id, other_user.id, "shared")

    metrics = StudioService.get_metrics(db_session, test_user.id, "discussion")
    assert metrics.total_posts == 1
    assert metrics.comments == 1
    assert metrics.community_links == 1
    assert metrics.shared == 1
    assert metrics.engagement_rate == 300.0
    assert metrics.top_posts[0]["engagement_rate"] == 300.0


def test_top_posts_limit(db_session, test_post, community_post, test_user):
    metrics = StudioService.get_metrics(db_session, test_user.id, top=1)
    assert metrics.total_posts == 2
    assert len(metrics.top_posts) == 1


def test_collect_rejects_unknown_type(db_session, test_user):
    with pytest.raises(ValueError):
        StudioService.collect(db_session, test_user.id, "video")
