"""
Rate Limiting Module

Sliding-window rate limiting backed by Redis sorted sets, with an in-memory
fallback when Redis is unavailable.

Applied to the expensive roster endpoints (bulk enrollment, permanent
subject deletion) so a single account cannot hammer them.
"""

import logging
import time
from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import Depends, HTTPException, status
from redis.asyncio import Redis
from redis.exceptions import RedisError

from schoolhub.core.auth import CurrentUser, get_current_user
from schoolhub.core.redis import get_redis

logger = logging.getLogger(__name__)

# Fallback store: {key: [timestamp, ...]}
_memory_store: dict[str, list[float]] = {}


class RateLimitExceeded(HTTPException):
    """Raised when a caller exceeds the allowed request rate."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "success": False,
                "error": "RATE_LIMIT_EXCEEDED",
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
            },
            headers={"Retry-After": str(window_seconds)},
        )


async def _check_rate_limit_redis(
    client: Redis,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    now = time.time()

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, now - window_seconds)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)
    results = await pipe.execute()

    return results[1] < limit


def _check_rate_limit_memory(key: str, limit: int, window_seconds: int) -> bool:
    # Per-process only; does not work across multiple server instances.
    now = time.time()
    window = [ts for ts in _memory_store.get(key, []) if ts > now - window_seconds]

    if len(window) >= limit:
        _memory_store[key] = window
        return False

    window.append(now)
    _memory_store[key] = window
    return True


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check whether a request identified by ``key`` is within its rate limit.

    Returns:
        True if the request is allowed, False if the limit is exceeded
    """
    client = get_redis()

    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except RedisError as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


def limit_per_user(
    action: str,
    limit: int,
    window_seconds: int = 60,
) -> Callable[..., Coroutine[Any, Any, None]]:
    """
    Build a dependency that rate limits ``action`` per authenticated user.

    Raises:
        RateLimitExceeded: When the caller is over the limit (HTTP 429)
    """

    async def _dependency(user: CurrentUser = Depends(get_current_user)) -> None:
        key = f"rate_limit:{action}:{user.id}"
        if not await check_rate_limit(key, limit, window_seconds):
            logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
            raise RateLimitExceeded(limit, window_seconds)

    return _dependency


__all__ = [
    "RateLimitExceeded",
    "check_rate_limit",
    "limit_per_user",
]
