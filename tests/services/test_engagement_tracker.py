# mypy: ignore-errors
# tests/services/test_engagement_tracker.py
import pytest

from flokkk.services import EngagementTracker


def test_flags_are_monotonic(db_session, test_post, test_user):
    """Test that setting one flag keeps the others and never clears it again."""
    first = EngagementTracker.track(db_session, "discussion", test_post.id, test_user.id, "viewed")
    second = EngagementTracker.track(db_session, "discussion", test_post.id, test_user.id, "saved")
    again = EngagementTracker.track(db_session, "discussion", test_post.id, test_user.id, "viewed")

    assert first.changed is True
    assert second.changed is True
    assert again.changed is False
    assert again.flags == {
        "appeared": False,
        "viewed": True,
        "penetrated": False,
        "saved": True,
        "shared": False,
    }
    assert again.counts["viewed"] == 1


def test_counts_by_post(db_session, test_post, community_post, test_user, other_user):
    EngagementTracker.track(db_session, "discussion", test_post.id, test_user.id, "appeared")
    EngagementTracker.track(db_session, "discussion", test_post.id, other_user.id, "appeared")
    EngagementTracker.track(db_session, "community", community_post.id, other_user.id, "appeared")

    counts = EngagementTracker.counts_by_post(db_session, "discussion", [test_post.id, 12345])
    assert list(counts) == [test_post.id]
    assert counts[test_post.id]["appeared"] == 2
    assert EngagementTracker.counts_by_post(db_session, "discussion", []) == {}


def test_counts_for_untracked_post(db_session, test_post):
    assert EngagementTracker.counts(db_session, "discussion", test_post.id) == {
        "appeared": 0,
        "viewed": 0,
        "penetrated": 0,
        "saved": 0,
        "shared": 0,
    }


def test_flags_of_missing_record():
    assert set(EngagementTracker.flags_of(None).values()) == {False}


@pytest.mark.parametrize(
    ("content_type", "flag"),
    [("video", "viewed"), ("discussion", "liked")],
)
def test_unknown_inputs_rejected(db_session, content_type, flag):
    with pytest.raises(ValueError):
        EngagementTracker.track(db_session, content_type, 1, 1, flag)
