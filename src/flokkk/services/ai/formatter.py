"""Markdown rendering of assistant answers."""

from __future__ import annotations

from flokkk.services.ai.community_search import CommunityResults
from flokkk.services.ai.web_search import WebSearchResult

MAX_POSTS = 3
MAX_LINKS = 4
MAX_WEB_RESULTS = 4

WEB_FAILURE_NOTE = "flokkk failed to get information from the web. Please try again later."


def format_community(results: CommunityResults, query: str) -> str:
    if not results.has_content:
        return format_no_community(query)

    lines = ["**From flokkk Community:**", ""]
    for post in results.posts[:MAX_POSTS]:
        lines.append(
            f"- [{post['title']}](/discussion?id={post['id']}) by @{post['username']} "
            f"({post['discussions']} comments, {post['link_count']} links)"
        )
        if post["content"]:
            lines.append(f"  {post['content']}")
    for link in results.links[:MAX_LINKS]:
        lines.append(f"- [{link['title']}]({link['url']}) from \"{link['post_title']}\"")
    return "\n".join(lines)


def format_no_community(query: str) -> str:
    return (
        f"flokkk community hasn't discussed **{query}** yet.\n\n"
        "Be the first to start a discussion!"
    )


def format_web(result: WebSearchResult) -> str:
    lines = ["**From the web:**", ""]
    if result.answer:
        lines.extend([result.answer, ""])
    for item in result.results[:MAX_WEB_RESULTS]:
        title = item.get("title") or item.get("url") or "Untitled"
        lines.append(f"- [{title}]({item.get('url', '')})")
    return "\n".join(lines)


def format_error(message: str) -> str:
    return f"> {message}"


def format_web_search_offer(query: str, remaining: int) -> str:
    if remaining <= 0:
        return "\n\nWeb search is unavailable until your daily quota resets."
    return f"\n\nSearch the web for \"{query}\"? {remaining} web searches left today."
