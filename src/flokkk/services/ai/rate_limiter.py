"""Per-user request limits for the AI assistant."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from threading import Lock
from typing import Any

import redis

from flokkk.core.settings import settings
from flokkk.services.ai.backend import connect_redis

logger = logging.getLogger(__name__)

REQUEST_MANUAL = "manual"
REQUEST_SUGGESTION = "suggestion"


@dataclass(frozen=True)
class RateLimitStatus:
    """Outcome of a rate-limit check."""

    allowed: bool
    request_type: str
    limit: int
    used_requests: int
    remaining_requests: int
    reset_time: datetime
    message: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "request_type": self.request_type,
            "limit": self.limit,
            "used_requests": self.used_requests,
            "remaining_requests": self.remaining_requests,
            "reset_time": self.reset_time.isoformat(),
            "message": self.message,
        }


class RateLimiter:
    """Fixed-window counter keyed by user and request type.

    The window opens with the first request and lasts
    ``settings.ai_rate_window_seconds``. Errors in the backing store let the
    request through.
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = client if client is not None else connect_redis()
        self._clock = clock

    @property
    def window_seconds(self) -> int:
        return settings.ai_rate_window_seconds

    def limit_for(self, request_type: str) -> int:
        return settings.rate_limits.get(request_type, settings.ai_rate_limit_manual)

    def check(self, user_id: int, request_type: str = REQUEST_MANUAL) -> RateLimitStatus:
        """Count one request against the caller's window and report whether it may proceed."""
        limit = self.limit_for(request_type)
        key = f"ratelimit:{user_id}:{request_type}"
        try:
            used, reset_at = self._peek(key)
            if used >= limit:
                reset_time = datetime.fromtimestamp(reset_at, UTC)
                return RateLimitStatus(
                    allowed=False,
                    request_type=request_type,
                    limit=limit,
                    used_requests=used,
                    remaining_requests=0,
                    reset_time=reset_time,
                    message=(
                        f"Rate limit exceeded. You can make {limit} {request_type} requests "
                        f"per hour. Try again at {reset_time:%H:%M:%S} UTC"
                    ),
                )
            used, reset_at = self._increment(key)
        except Exception:
            logger.exception("Rate limiting failed for user %s; allowing request", user_id)
            return RateLimitStatus(
                allowed=True,
                request_type=request_type,
                limit=limit,
                used_requests=0,
                remaining_requests=limit,
                reset_time=datetime.fromtimestamp(self._clock() + self.window_seconds, UTC),
                message="Rate limiting unavailable - request allowed",
            )

        remaining = max(0, limit - used)
        return RateLimitStatus(
            allowed=True,
            request_type=request_type,
            limit=limit,
            used_requests=used,
            remaining_requests=remaining,
            reset_time=datetime.fromtimestamp(reset_at, UTC),
            message=f"Request allowed. {remaining} requests remaining this hour.",
        )

    def status(self, user_id: int, request_type: str = REQUEST_MANUAL) -> RateLimitStatus:
        """Report the caller's window without counting a request."""
        limit = self.limit_for(request_type)
        used, reset_at = self._peek(f"ratelimit:{user_id}:{request_type}")
        remaining = max(0, limit - used)
        return RateLimitStatus(
            allowed=remaining > 0,
            request_type=request_type,
            limit=limit,
            used_requests=used,
            remaining_requests=remaining,
            reset_time=datetime.fromtimestamp(reset_at, UTC),
            message=f"{remaining} requests remaining this hour.",
        )

    # --- storage -------------------------------------------------------------------
    def _peek(self, key: str) -> tuple[int, float]:
        now = self._clock()
        if self._redis is not None:
            try:
                pipe = self._redis.pipeline()
                pipe.get(key)
                pipe.ttl(key)
                raw, ttl = pipe.execute()
                if raw is None or ttl is None or ttl < 0:
                    return 0, now + self.window_seconds
                return int(raw), now + int(ttl)
            except redis.RedisError:
                logger.warning("Redis rate limit read failed; switching to in-process state")
                self._redis = None

        with _WINDOW_LOCK:
            entry = _WINDOWS.get(key)
            if entry is None or entry[1] + self.window_seconds <= now:
                return 0, now + self.window_seconds
            return int(entry[0]), entry[1] + self.window_seconds

    def _increment(self, key: str) -> tuple[int, float]:
        now = self._clock()
        if self._redis is not None:
            try:
                used = int(self._redis.incr(key))
                ttl = self._redis.ttl(key)
                if ttl is None or ttl < 0:
                    self._redis.expire(key, self.window_seconds)
                    ttl = self.window_seconds
                return used, now + int(ttl)
            except redis.RedisError:
                logger.warning("Redis rate limit write failed; switching to in-process state")
                self._redis = None

        with _WINDOW_LOCK:
            entry = _WINDOWS.get(key)
            if entry is None or entry[1] + self.window_seconds <= now:
                _drop_expired_windows(now, self.window_seconds)
                entry = [0, now]
                _WINDOWS[key] = entry
            entry[0] += 1
            return int(entry[0]), entry[1] + self.window_seconds


# key -> [count, window start]
_WINDOWS: dict[str, list[float]] = {}
_WINDOW_LOCK = Lock()


def _drop_expired_windows(now: float, window_seconds: int) -> None:
    # Caller holds _WINDOW_LOCK.
    expired = [key for key, (_, started) in _WINDOWS.items() if started + window_seconds <= now]
    for key in expired:
        del _WINDOWS[key]


def reset_local_windows() -> None:
    """Forget all in-process windows."""
    with _WINDOW_LOCK:
        _WINDOWS.clear()
