"""Per-client request quotas backed by Redis, with an in-process fallback."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import HTTPException, Request
import redis.asyncio as redis

from config import settings

logger = logging.getLogger(__name__)

# name -> (requests allowed, window in seconds)
QUOTAS: Dict[str, Tuple[int, int]] = {
    "auth_signup": (10, 3600),
    "auth_signin": (20, 900),
    "comments": (30, 600),
    "upload": (60, 3600),
    "upload_client_token": (120, 3600),
}

_redis_client: Optional[redis.Redis] = None
_local_counters: Dict[str, Tuple[int, float]] = {}
_local_lock = asyncio.Lock()


class RateLimitExceeded(HTTPException):
    def __init__(self, quota: str, retry_after: int):
        super().__init__(
            status_code=429,
            detail=f"Rate limit exceeded for {quota}. Try again later.",
            headers={"Retry-After": str(max(retry_after, 1))},
        )


def _client_identifier(request: Request) -> str:
    # Behind the hosting proxy every request shares one peer address.
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_client


async def close_rate_limit_client() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def reset_local_counters() -> None:
    _local_counters.clear()


async def _consume_redis_quota(key: str, window_seconds: int) -> Tuple[int, int]:
    async with _get_redis().pipeline(transaction=True) as pipe:
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = await pipe.execute()
    if ttl is None or int(ttl) < 0:
        await _get_redis().expire(key, window_seconds)
        ttl = window_seconds
    return int(count), int(ttl)


async def _consume_local_quota(key: str, window_seconds: int) -> Tuple[int, int]:
    now = time.time()
    async with _local_lock:
        count, reset_at = _local_counters.get(key, (0, now + window_seconds))
        if now >= reset_at:
            count = 0
            reset_at = now + window_seconds
        count += 1
        _local_counters[key] = (count, reset_at)
    return count, math.ceil(reset_at - now)


def rate_limit(quota: str) -> Callable[[Request], None]:
    """Return a FastAPI dependency enforcing the named quota per client."""
    if quota not in QUOTAS:
        raise KeyError(f"Unknown rate limit quota: {quota}")

    async def _dependency(request: Request):
        if getattr(request.app.state, "disable_rate_limits", False):
            return

        limit, window_seconds = QUOTAS[quota]
        key = f"rankmaker:rate:{quota}:{_client_identifier(request)}"
        try:
            count, retry_after = await _consume_redis_quota(key, window_seconds)
        except Exception as exc:
            logger.warning("Redis rate limit unavailable, using local counters: %s", exc)
            count, retry_after = await _consume_local_quota(key, window_seconds)

        if count > limit:
            raise RateLimitExceeded(quota, retry_after)

    return _dependency
