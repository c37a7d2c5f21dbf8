"""Cart package: models, store, storage, and session service."""
from .models import LineItem, CartState, CartSnapshot
from .store import CartStore
from .storage import CartRepository
from .service import CartService, get_cart_service

__all__ = [
    "LineItem",
    "CartState",
    "CartSnapshot",
    "CartStore",
    "CartRepository",
    "CartService",
    "get_cart_service",
]
