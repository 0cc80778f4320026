"""
Rate Limiting Module

Provides rate limiting for API endpoints using Redis as the backend.
Falls back to in-memory storage if Redis is unavailable.

SECURITY: Rate limiting prevents abuse of email-sending admin endpoints
(bulk announcements) and repeated uploads.
"""

import logging
import time

from fastapi import HTTPException, Request, status
from redis.asyncio import Redis, from_url

logger = logging.getLogger(__name__)

MEMORY_SWEEP_INTERVAL_SECONDS = 60


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "RATE_LIMIT_EXCEEDED",
                "message": (
                    f"Rate limit exceeded. Maximum {limit} requests "
                    f"per {window_seconds} seconds."
                ),
                "retry_after_seconds": window_seconds,
            },
            headers={"Retry-After": str(window_seconds)},
        )


class RateLimiter:
    """
    Sliding-window rate limiter.

    Uses Redis sorted sets when a client is available, otherwise an
    in-process window store (not shared across server instances).

    Args:
        redis_client: Connected Redis client, or None for memory-only limiting
    """

    def __init__(self, redis_client: Redis | None = None):
        self.redis_client = redis_client
        # Format: {key: [timestamp, ...]}
        self._memory_store: dict[str, list[float]] = {}
        self._memory_windows: dict[str, int] = {}
        self._last_sweep = 0.0

    @classmethod
    async def connect(cls, redis_url: str) -> "RateLimiter":
        """Create a limiter backed by Redis, falling back to memory if unreachable."""
        try:
            client = from_url(redis_url, encoding="utf-8", decode_responses=True)
            await client.ping()
            return cls(client)
        except Exception as e:
            logger.warning(f"Redis unavailable for rate limiting, using memory: {e}")
            return cls(None)

    async def close(self) -> None:
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None

    async def _check_redis(self, key: str, limit: int, window_seconds: int) -> bool:
        now = time.time()
        window_start = now - window_seconds

        pipe = self.redis_client.pipeline()
        pipe.zremrangebyscore(key, 0, window_start)
        pipe.zcard(key)
        pipe.zadd(key, {str(now): now})
        pipe.expire(key, window_seconds)

        results = await pipe.execute()
        current_count = results[1]

        return current_count < limit

    def _sweep_memory(self, now: float) -> None:
        """Drop keys whose newest request has left its window."""
        if now - self._last_sweep < MEMORY_SWEEP_INTERVAL_SECONDS:
            return
        self._last_sweep = now

        expired = [
            key
            for key, entries in self._memory_store.items()
            if not entries or entries[-1] <= now - self._memory_windows.get(key, 0)
        ]
        for key in expired:
            del self._memory_store[key]
            self._memory_windows.pop(key, None)

    def _check_memory(self, key: str, limit: int, window_seconds: int) -> bool:
        now = time.time()
        window_start = now - window_seconds
        self._sweep_memory(now)
        self._memory_windows[key] = window_seconds

        entries = [ts for ts in self._memory_store.get(key, []) if ts > window_start]
        if len(entries) >= limit:
            self._memory_store[key] = entries
            return False

        entries.append(now)
        self._memory_store[key] = entries
        return True

    async def check(self, key: str, limit: int, window_seconds: int) -> bool:
        """
        Check if a request is within rate limits and record it.

        Args:
            key: Unique key for this rate limit (e.g., "admin:bulk_email:user_123")
            limit: Maximum requests allowed in the window
            window_seconds: Time window in seconds

        Returns:
            True if request is allowed, False if rate limit exceeded
        """
        if self.redis_client:
            try:
                return await self._check_redis(key, limit, window_seconds)
            except Exception as e:
                logger.warning(f"Redis rate limit check failed: {e}")

        return self._check_memory(key, limit, window_seconds)

    async def enforce(self, key: str, limit: int, window_seconds: int) -> None:
        """
        Like check(), but raises when the limit is exceeded.

        Raises:
            RateLimitExceeded: HTTP 429 with Retry-After
        """
        if not await self.check(key, limit, window_seconds):
            logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
            raise RateLimitExceeded(limit, window_seconds)


def get_rate_limiter(request: Request) -> RateLimiter:
    """FastAPI dependency returning the application's RateLimiter."""
    return request.app.state.rate_limiter


__all__ = [
    "RateLimiter",
    "RateLimitExceeded",
    "get_rate_limiter",
]
