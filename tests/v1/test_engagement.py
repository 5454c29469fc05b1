# mypy: ignore-errors
# tests/v1/test_engagement.py
"""Tests for engagement tracking endpoints."""

from fastapi import status

from flokkk.models import PostEngagement


def test_track_view_sets_flag(client, test_post, other_auth_token):
    """Test that the first view sets the flag and counts one viewer."""
    response = client.post(f"/api/v1/posts/{test_post.id}/track-view", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["message"] == "Viewed tracked"
    assert data["engagement"]["has_viewed"] is True
    assert data["engagement"]["has_saved"] is False
    assert data["counts"]["viewed"] == 1
    assert data["counts"]["appeared"] == 0


def test_repeat_tracking_is_idempotent(client, db_session, test_post, other_auth_token, other_user):
    """Test that tracking the same action twice leaves the counts alone."""
    url = f"/api/v1/posts/{test_post.id}/track-appear"
    client.post(url, headers=other_auth_token)
    second = client.post(url, headers=other_auth_token)

    assert second.json()["message"] == "Already tracked for this user"
    assert second.json()["counts"]["appeared"] == 1
    rows = db_session.query(PostEngagement).filter_by(post_id=test_post.id, user_id=other_user.id).all()
    assert len(rows) == 1


def test_counts_are_per_user(client, test_post, auth_token, other_auth_token, third_auth_token):
    """Test that counts reflect distinct users."""
    url = f"/api/v1/posts/{test_post.id}/track-click"
    for headers in (auth_token, other_auth_token, third_auth_token, other_auth_token):
        response = client.post(url, headers=headers)

    assert response.json()["counts"]["penetrated"] == 3
    assert response.json()["engagement"]["has_penetrated"] is True


def test_share_bumps_share_counter_once(client, db_session, test_post, other_auth_token):
    """Test that a first share increments the discussion share count and a repeat does not."""
    url = f"/api/v1/posts/{test_post.id}/track-share"
    client.post(url, headers=other_auth_token)
    client.post(url, headers=other_auth_token)

    db_session.refresh(test_post)
    assert test_post.shares == 1


def test_unknown_action_rejected(client, test_post, other_auth_token):
    """Test that an action outside the known set is a 400."""
    response = client.post(f"/api/v1/posts/{test_post.id}/track-like", headers=other_auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_track_missing_post(client, other_auth_token):
    response = client.post("/api/v1/posts/99999/track-view", headers=other_auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_track_requires_auth(client, test_post):
    response = client.post(f"/api/v1/posts/{test_post.id}/track-view")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_community_post_tracking_is_separate(client, community_post, test_post, other_auth_token):
    """Test that community post engagement does not leak into discussion counts."""
    response = client.post(
        f"/api/v1/community-posts/{community_post.id}/track-save",
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["counts"]["saved"] == 1

    discussion = client.post(f"/api/v1/posts/{test_post.id}/track-view", headers=other_auth_token)
    assert discussion.json()["counts"]["saved"] == 0


def test_community_post_views_and_delete(client, community_post, auth_token, other_auth_token):
    """Test that fetching a community post counts a view and only the owner can delete it."""
    first = client.get(f"/api/v1/community-posts/{community_post.id}")
    second = client.get(f"/api/v1/community-posts/{community_post.id}")
    assert first.json()["views"] == 1
    assert second.json()["views"] == 2

    forbidden = client.delete(f"/api/v1/community-posts/{community_post.id}", headers=other_auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    deleted = client.delete(f"/api/v1/community-posts/{community_post.id}", headers=auth_token)
    assert deleted.status_code == status.HTTP_200_OK
    assert client.get(f"/api/v1/community-posts/{community_post.id}").status_code == 404


def test_create_community_post(client, auth_token):
    response = client.post(
        "/api/v1/community-posts/",
        json={"title": " Desk setup ", "content": "Finally tidy"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["title"] == "Desk setup"
    assert response.json()["views"] == 0
