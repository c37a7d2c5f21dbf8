"""
Redis client for cart persistence.

Uses Upstash Redis over REST, so it works from serverless functions without a
persistent connection pool.
"""

import os
from typing import Optional

from upstash_redis.asyncio import Redis as AsyncRedis


# Upstash uses REST_URL and REST_TOKEN
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

_redis_client: Optional[AsyncRedis] = None


def get_redis() -> AsyncRedis:
    """
    Get async Upstash Redis client (singleton).

    Raises:
        ValueError: UPSTASH_REDIS_REST_URL / UPSTASH_REDIS_REST_TOKEN not set
    """
    global _redis_client

    if _redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = AsyncRedis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _redis_client


class RedisKeys:
    """Redis key prefixes."""

    CART = "cart:"  # cart:{session_id}

    @staticmethod
    def cart_key(session_id: str) -> str:
        return f"{RedisKeys.CART}{session_id}"


class TTL:
    """Time-to-live constants for Redis keys (seconds)."""

    CART = int(os.environ.get("CART_TTL_SECONDS", "86400"))  # 24 hours
