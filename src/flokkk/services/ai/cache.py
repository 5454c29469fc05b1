"""Cache of web search results, keyed by normalized query."""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Callable
from threading import Lock
from typing import Any

import redis

from flokkk.core.settings import settings
from flokkk.services.ai.backend import connect_redis

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def cache_key(query: str) -> str:
    """Return the storage key for ``query``."""
    return f"websearch:{_NON_ALNUM.sub('_', query.lower())}"


class WebSearchCache:
    """Stores search payloads for ``settings.web_search_cache_hours``.

    Cache failures are logged and treated as misses.
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = client if client is not None else connect_redis()
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return settings.web_search_cache_hours * 3600

    def get(self, query: str) -> dict[str, Any] | None:
        key = cache_key(query)
        if self._redis is not None:
            try:
                raw = self._redis.get(key)
                return json.loads(raw) if raw else None
            except (redis.RedisError, ValueError):
                logger.warning("Web search cache read failed for %r", query)
                self._redis = None

        with _CACHE_LOCK:
            entry = _LOCAL_CACHE.get(key)
            if entry is None:
                return None
            expires_at, payload = entry
            if expires_at <= self._clock():
                _LOCAL_CACHE.pop(key, None)
                return None
            return payload

    def set(self, query: str, payload: dict[str, Any]) -> None:
        key = cache_key(query)
        if self._redis is not None:
            try:
                self._redis.set(key, json.dumps(payload), ex=self.ttl_seconds)
                return
            except (redis.RedisError, TypeError, ValueError):
                logger.warning("Web search cache write failed for %r", query)
                self._redis = None

        now = self._clock()
        with _CACHE_LOCK:
            expired = [name for name, (expires_at, _) in _LOCAL_CACHE.items() if expires_at <= now]
            for name in expired:
                del _LOCAL_CACHE[name]
            _LOCAL_CACHE[key] = (now + self.ttl_seconds, payload)


_LOCAL_CACHE: dict[str, tuple[float, dict[str, Any]]] = {}
_CACHE_LOCK = Lock()


def clear_local_cache() -> None:
    """Empty the in-process cache."""
    with _CACHE_LOCK:
        _LOCAL_CACHE.clear()
