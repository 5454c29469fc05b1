# mypy: ignore-errors
# tests/v1/test_history.py
"""Tests for the recently viewed endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status

from flokkk.models import Post, RecentlyViewed

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def second_post(db_session, other_user):
    post = Post(user_id=other_user.id, title="Modular patching", content="x" * 250)
    db_session.add(post)
    db_session.flush()
    db_session.refresh(post)
    return post


@pytest.fixture()
def ticking_clock(mocker):
    """Make each recorded view one minute later than the last."""
    ticks = (BASE_TIME + timedelta(minutes=step) for step in range(1000))
    return mocker.patch("flokkk.services.history.utcnow", side_effect=lambda: next(ticks))


def _track(client, post_id, headers):
    return client.post("/api/v1/recently-viewed/track", json={"post_id": post_id}, headers=headers)


def test_track_and_list(client, test_post, second_post, other_auth_token, ticking_clock):
    """Test that the newest view comes first and a repeat view moves an item up."""
    assert _track(client, test_post.id, other_auth_token).json() == {
        "message": "View recorded successfully"
    }
    _track(client, second_post.id, other_auth_token)
    _track(client, test_post.id, other_auth_token)

    response = client.get("/api/v1/recently-viewed/", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["count"] == 2
    assert [item["id"] for item in data["items"]] == [test_post.id, second_post.id]

    first = data["items"][0]
    assert first["title"] == "Best synth records"
    assert first["thumbnail"] == "https://img.example.com/synth.png"
    assert first["author"]["username"] == "alice"

    second = data["items"][1]
    assert second["thumbnail"] is None
    assert len(second["description"]) == 200
    assert second["description"].endswith("...")


def test_list_respects_limit(client, test_post, second_post, other_auth_token, ticking_clock):
    _track(client, test_post.id, other_auth_token)
    _track(client, second_post.id, other_auth_token)

    data = client.get("/api/v1/recently-viewed/?limit=1", headers=other_auth_token).json()
    assert [item["id"] for item in data["items"]] == [second_post.id]


def test_history_is_private(client, test_post, auth_token, other_auth_token):
    _track(client, test_post.id, other_auth_token)

    data = client.get("/api/v1/recently-viewed/", headers=auth_token).json()
    assert data == {"items": [], "count": 0}


def test_track_unknown_post(client, other_auth_token):
    response = _track(client, 99999, other_auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Post not found"}


def test_remove_one_item(client, db_session, test_post, other_auth_token, other_user):
    _track(client, test_post.id, other_auth_token)

    response = client.delete(f"/api/v1/recently-viewed/{test_post.id}", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Item removed from history"}
    assert db_session.get(RecentlyViewed, (other_user.id, test_post.id)) is None

    again = client.delete(f"/api/v1/recently-viewed/{test_post.id}", headers=other_auth_token)
    assert again.status_code == status.HTTP_404_NOT_FOUND
    assert again.json() == {"message": "Item not found in history"}


def test_clear_history(client, test_post, second_post, other_auth_token):
    _track(client, test_post.id, other_auth_token)
    _track(client, second_post.id, other_auth_token)

    response = client.delete("/api/v1/recently-viewed/clear", headers=other_auth_token)
    assert response.json() == {"message": "History cleared successfully", "cleared": True}
    assert client.get("/api/v1/recently-viewed/", headers=other_auth_token).json()["count"] == 0

    empty = client.delete("/api/v1/recently-viewed/clear", headers=other_auth_token)
    assert empty.json()["cleared"] is False


def test_deleted_discussion_leaves_history(client, db_session, test_post, auth_token, other_auth_token):
    """Test that deleting a discussion removes it from everyone's history."""
    _track(client, test_post.id, other_auth_token)

    client.delete(f"/api/v1/posts/{test_post.id}", headers=auth_token)
    assert db_session.query(RecentlyViewed).count() == 0


def test_history_requires_auth(client, test_post):
    assert _track(client, test_post.id, {}).status_code == status.HTTP_401_UNAUTHORIZED
    assert client.get("/api/v1/recently-viewed/").status_code == status.HTTP_401_UNAUTHORIZED
