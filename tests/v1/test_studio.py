# mypy: ignore-errors
# tests/v1/test_studio.py
"""Tests for creator studio endpoints."""

from fastapi import status


def _track(client, post_id, action, headers, prefix="posts"):
    response = client.post(f"/api/v1/{prefix}/{post_id}/track-{action}", headers=headers)
    assert response.status_code == status.HTTP_200_OK


def test_metrics_empty_account(client, auth_token):
    """Test that a user with no content gets zeros and no division error."""
    response = client.get("/api/v1/studio/metrics", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total_posts"] == 0
    assert data["engagement_rate"] == 0.0
    assert data["top_posts"] == []


def test_metrics_aggregate(
    client, test_post, community_post, community_link, other_auth_token, third_auth_token, auth_token
):
    """Test totals and the engagement rate across both content types."""
    for headers in (other_auth_token, third_auth_token):
        _track(client, test_post.id, "appear", headers)
    _track(client, test_post.id, "click", other_auth_token)
    _track(client, community_post.id, "appear", other_auth_token, prefix="community-posts")
    _track(client, community_post.id, "save", other_auth_token, prefix="community-posts")
    client.post(
        f"/api/v1/posts/{test_post.id}/comments",
        json={"content": "Nice picks"},
        headers=third_auth_token,
    )

    data = client.get("/api/v1/studio/metrics", headers=auth_token).json()
    assert data["total_posts"] == 2
    assert data["discussions"] == 1
    assert data["community_posts"] == 1
    assert data["appeared"] == 3
    assert data["penetrated"] == 1
    assert data["saved"] == 1
    assert data["comments"] == 1
    assert data["community_links"] == 1
    # (1 click + 1 save + 1 comment + 1 community link) / 3 appearances
    assert data["engagement_rate"] == 133.33
    assert [post["id"] for post in data["top_posts"]] == [test_post.id, community_post.id]


def test_metrics_filtered_by_type(client, test_post, community_post, other_auth_token, auth_token):
    _track(client, community_post.id, "appear", other_auth_token, prefix="community-posts")

    data = client.get("/api/v1/studio/metrics?type=community", headers=auth_token).json()
    assert data["total_posts"] == 1
    assert data["discussions"] == 0
    assert data["appeared"] == 1
    assert data["top_posts"][0]["type"] == "community"


def test_studio_posts_page(client, test_post, community_post, auth_token):
    """Test that the studio listing pages through the caller's content."""
    response = client.get("/api/v1/studio/posts?limit=1", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 2
    assert data["limit"] == 1
    assert len(data["posts"]) == 1
    assert data["posts"][0]["id"] == community_post.id


def test_studio_only_sees_own_content(client, test_post, other_auth_token):
    data = client.get("/api/v1/studio/posts", headers=other_auth_token).json()
    assert data["posts"] == []
    assert data["total"] == 0


def test_studio_rejects_unknown_type(client, auth_token):
    response = client.get("/api/v1/studio/metrics?type=videos", headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_edit_discussion(client, db_session, test_post, auth_token):
    """Test that only the sent fields change on a discussion."""
    response = client.patch(
        f"/api/v1/studio/posts/{test_post.id}",
        json={"title": "  Best synth records ever ", "hashtags": ["synth", "vinyl"]},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["message"] == "Post updated successfully"
    assert data["post"]["type"] == "discussion"
    assert data["post"]["title"] == "Best synth records ever"
    assert data["post"]["hashtags"] == ["synth", "vinyl"]
    assert data["post"]["content"] == "Share the records that got you into synthesizers."

    db_session.refresh(test_post)
    assert test_post.title == "Best synth records ever"


def test_edit_community_post(client, community_post, auth_token):
    response = client.patch(
        f"/api/v1/studio/posts/{community_post.id}",
        json={"content_type": "community", "content": "Rearranged the desk"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    post = response.json()["post"]
    assert post["type"] == "community"
    assert post["title"] == "Studio tour"
    assert post["content"] == "Rearranged the desk"
    assert post["hashtags"] == []


def test_edit_community_post_rejects_hashtags(client, community_post, auth_token):
    response = client.patch(
        f"/api/v1/studio/posts/{community_post.id}",
        json={"content_type": "community", "hashtags": ["desk"]},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Community posts do not have hashtags"


def test_edit_falls_back_to_community_post(client, community_post, auth_token):
    """Test that without a content type a community post is found after the discussions."""
    response = client.patch(
        f"/api/v1/studio/posts/{community_post.id}",
        json={"title": "Studio tour 2"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["post"]["type"] == "community"


def test_edit_someone_elses_post(client, test_post, other_auth_token):
    """Test that another user's post is reported as missing."""
    response = client.patch(
        f"/api/v1/studio/posts/{test_post.id}",
        json={"title": "Mine now"},
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Post not found or you do not have permission to edit it"}


def test_edit_blank_title(client, test_post, auth_token):
    response = client.patch(
        f"/api/v1/studio/posts/{test_post.id}",
        json={"title": "   "},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Title cannot be empty"
