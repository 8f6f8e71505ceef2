"""
Rate Limiting Module

Sliding-window rate limiting for the public intake endpoints, keyed by
caller IP. Uses Redis sorted sets when a Redis client is initialized and
falls back to in-memory storage otherwise.

The public endpoints send email and write to storage, so they are the
ones worth protecting from scripted abuse.
"""

import logging
import time

from lmghi_api.core.redis import get_redis

logger = logging.getLogger(__name__)

# In-memory rate limit storage (fallback when Redis unavailable)
# Format: {key: [timestamp, ...]}
_memory_store: dict[str, list[float]] = {}
# Format: {key: time after which the key's window is empty}
_memory_expiry: dict[str, float] = {}


async def _check_rate_limit_redis(
    client,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using Redis.

    Uses a sliding window algorithm with Redis sorted sets.

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using in-memory storage.

    Note: This doesn't work across multiple server instances.
    """
    now = time.time()
    window_start = now - window_seconds

    _prune_memory_store(now)

    timestamps = [ts for ts in _memory_store.get(key, []) if ts > window_start]

    if len(timestamps) >= limit:
        _memory_store[key] = timestamps
        return False

    timestamps.append(now)
    _memory_store[key] = timestamps
    _memory_expiry[key] = now + window_seconds
    return True


def _prune_memory_store(now: float) -> None:
    """Drop keys whose window no longer holds any request."""
    expired = [key for key, expires_at in _memory_expiry.items() if expires_at <= now]
    for key in expired:
        _memory_store.pop(key, None)
        _memory_expiry.pop(key, None)


async def check_rate_limit(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check if a request is within rate limits.

    Tries Redis first, falls back to in-memory storage.

    Args:
        key: Unique key for this rate limit (e.g., "volunteer:submit:203.0.113.7")
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    redis_client = await get_redis()

    if redis_client:
        try:
            return await _check_rate_limit_redis(redis_client, key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


def reset_memory_store() -> None:
    """Clear the in-memory fallback store."""
    _memory_store.clear()
    _memory_expiry.clear()


__all__ = [
    "check_rate_limit",
    "reset_memory_store",
]
