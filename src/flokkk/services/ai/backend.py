"""Shared Redis connection for the AI services.

Redis holds short-lived counters and cached search results. When it is not
configured, unreachable, or the process runs under pytest, callers fall back
to in-process state guarded by a lock.
"""

from __future__ import annotations

import logging
import os
from typing import Final

import redis

from flokkk.core.settings import settings

logger = logging.getLogger(__name__)

_TEST_MODE: Final[bool] = os.getenv("PYTEST_RUNNING", "").lower() == "true"


def connect_redis() -> redis.Redis | None:
    """Return a Redis client, or ``None`` when the in-process fallback should be used."""
    if _TEST_MODE or not settings.redis_url:
        return None
    try:
        return redis.from_url(settings.redis_url)  # type: ignore[no-untyped-call]
    except (redis.RedisError, ValueError):
        logger.warning("Redis unavailable at %s; using in-process state", settings.redis_url)
        return None
