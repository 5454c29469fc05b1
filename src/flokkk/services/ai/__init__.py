"""AI assistant services: rate limiting, search and classification."""

from .chat import ChatOrchestrator, ChatResult, get_chat_orchestrator
from .classifier import CATEGORIES, DEFAULT_CATEGORY, CategoryClassifier, match_category
from .community_search import extract_keywords, search_community
from .quota import WebSearchQuotaService
from .rate_limiter import RateLimiter
from .web_search import TavilySearchClient, WebSearchError

__all__ = [
    "ChatOrchestrator", "ChatResult", "get_chat_orchestrator",
    "CATEGORIES", "DEFAULT_CATEGORY", "CategoryClassifier", "match_category",
    "extract_keywords", "search_community",
    "WebSearchQuotaService",
    "RateLimiter",
    "TavilySearchClient", "WebSearchError",
]
