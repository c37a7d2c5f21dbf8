"""Redis persistence for cart state."""
import json
from typing import Optional

from storefront.db import get_redis, RedisKeys, TTL
from storefront.errors import CartStorageError, ERROR_CART_UNAVAILABLE
from storefront.logging import get_logger, get_session_logger
from .models import CartState

logger = get_logger(__name__)


class CartRepository:
    """
    Stores CartState.to_dict() payloads as JSON under cart:{session_id}.

    Abandoned carts expire after TTL.CART seconds.
    """

    def __init__(self, redis=None, ttl: int = TTL.CART):
        self._redis = redis  # Lazy initialization
        self.ttl = ttl

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis()
            except ValueError as e:
                raise CartStorageError(f"{ERROR_CART_UNAVAILABLE}: {e}") from e
        return self._redis

    async def load(self, session_id: str) -> Optional[dict]:
        """Return the stored payload, or None when absent or unreadable."""
        key = RedisKeys.cart_key(session_id)
        try:
            data = await self.redis.get(key)
        except CartStorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to get cart from Redis: {e}")
            raise CartStorageError(ERROR_CART_UNAVAILABLE) from e

        if not data:
            return None

        try:
            payload = json.loads(data)
            # Shape check only; CartStore.hydrate validates the lines
            CartState.from_dict(payload)
            return payload
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            get_session_logger(__name__, session_id).warning(f"Corrupted cart data: {e}")
            await self.delete(session_id)
            return None

    async def save(self, session_id: str, payload: dict) -> None:
        """Write a CartState.to_dict() payload and refresh its TTL."""
        key = RedisKeys.cart_key(session_id)
        try:
            await self.redis.set(key, json.dumps(payload), ex=self.ttl)
        except CartStorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to save cart to Redis: {e}")
            raise CartStorageError(ERROR_CART_UNAVAILABLE) from e

    async def delete(self, session_id: str) -> None:
        key = RedisKeys.cart_key(session_id)
        try:
            await self.redis.delete(key)
        except CartStorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to clear cart from Redis: {e}")
            raise CartStorageError(ERROR_CART_UNAVAILABLE) from e
