# mypy: ignore-errors
# tests/services/test_community_search.py
from flokkk.models import Post
from flokkk.services.ai import extract_keywords, search_community
from flokkk.services.ai.formatter import format_community, format_web_search_offer


def test_extract_keywords_drops_stop_words_and_short_words():
    assert extract_keywords("What is the best analog synth for a beginner?") == [
        "what",
        "best",
        "analog",
        "synth",
        "beginner",
        "what best",
        "best analog",
        "analog synth",
    ]


def test_extract_keywords_dedupes():
    assert extract_keywords("synth synth synth") == ["synth", "synth synth"]


def test_extract_keywords_empty():
    assert extract_keywords("to be or an") == []


def test_search_finds_posts_and_links(db_session, test_post, community_link):
    results = search_community(db_session, "analog primer")

    assert [post["id"] for post in results.posts] == []
    assert [link["title"] for link in results.links] == ["Analog primer"]
    assert results.links[0]["link_type"] == "community"
    assert results.links[0]["post_title"] == "Best synth records"
    assert results.has_content is True


def test_search_matches_post_content(db_session, test_post, test_user):
    db_session.add(Post(user_id=test_user.id, title="Unrelated", content="x" * 300 + " synthesizers"))
    db_session.flush()

    results = search_community(db_session, "synth")
    by_title = {post["title"]: post for post in results.posts}
    assert set(by_title) == {"Best synth records", "Unrelated"}
    assert by_title["Unrelated"]["content"].endswith("...")
    assert len(by_title["Unrelated"]["content"]) == 203
    assert by_title["Best synth records"]["link_count"] == 5
    assert by_title["Best synth records"]["username"] == "alice"


def test_links_ranked_by_votes(db_session, test_post):
    results = search_community(db_session, "link")
    assert results.links[0]["title"] == "Link 0"
    assert results.links[0]["votes"] == 5


def test_short_query_falls_back_to_raw_text(db_session, test_post, test_user):
    db_session.add(Post(user_id=test_user.id, title="DX7 patches"))
    db_session.flush()

    results = search_community(db_session, "DX")
    assert [post["title"] for post in results.posts] == ["DX7 patches"]


def test_no_match(db_session, test_post):
    results = search_community(db_session, "theremin")
    assert results.has_content is False
    assert results.as_dict() == {"posts": [], "links": []}


def test_format_community_markdown(db_session, test_post):
    text = format_community(search_community(db_session, "synth records"), "synth records")
    assert text.startswith("**From flokkk Community:**")
    assert f"[Best synth records](/discussion?id={test_post.id}) by @alice" in text


def test_web_search_offer():
    assert "3 web searches left today" in format_web_search_offer("moog", 3)
    assert "unavailable" in format_web_search_offer("moog", 0)
