"""Pytest configuration and fixtures"""
import os
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

# Set test environment variables
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")
os.environ.setdefault("CART_CURRENCY", "USD")

from storefront.cart import CartRepository, CartService, CartStore
from storefront.models import Product


@pytest.fixture
def mock_redis():
    """Async Redis mock backed by a plain dict (available as .data)."""
    data = {}
    redis = Mock()
    redis.data = data

    async def _get(key):
        return data.get(key)

    async def _set(key, value, ex=None):
        data[key] = value
        return True

    async def _delete(key):
        return 1 if data.pop(key, None) is not None else 0

    redis.get = AsyncMock(side_effect=_get)
    redis.set = AsyncMock(side_effect=_set)
    redis.delete = AsyncMock(side_effect=_delete)
    return redis


@pytest.fixture
def cart_repository(mock_redis):
    return CartRepository(redis=mock_redis)


@pytest.fixture
def cart_service(cart_repository):
    return CartService(repository=cart_repository)


@pytest.fixture
def store():
    """Fresh, isolated cart store"""
    return CartStore()


@pytest.fixture
def sample_product():
    """Sample product data"""
    return {
        "id": "prod-tee-001",
        "name": "Oversized Logo Tee",
        "price": 500,
        "image": "https://cdn.example.com/tee.jpg",
        "stock": 12,
        "originalPrice": 700,
        "category": "t-shirts",
    }


@pytest.fixture
def tee():
    return Product(id="p1", name="Logo Tee", price=Decimal("500"), image="/tee.jpg", stock=10)


@pytest.fixture
def hoodie():
    return Product(id="p2", name="Heavy Hoodie", price=Decimal("300"), image="/hoodie.jpg", stock=4)
