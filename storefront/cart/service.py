"""Session-scoped cart access backed by Redis."""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from storefront.errors import CartValidationError
from storefront.logging import get_session_logger
from .storage import CartRepository
from .store import CartStore


class CartService:
    """
    Hands out a CartStore per request, loaded from and saved back to storage.

    Usage:
        async with service.session(session_id) as store:
            store.add_item(product, 2)
        # saved here if anything changed
    """

    def __init__(self, repository: Optional[CartRepository] = None, open_on_add: bool = False):
        self.repository = repository or CartRepository()
        self.open_on_add = open_on_add

    async def load(self, session_id: str) -> CartStore:
        """Build a store from the stored cart, or an empty one."""
        store = CartStore(open_on_add=self.open_on_add)
        payload = await self.repository.load(session_id)
        if payload is None:
            return store

        try:
            store.hydrate(payload)
        except CartValidationError as e:
            get_session_logger(__name__, session_id).warning(f"Discarding invalid stored cart: {e}")
            await self.repository.delete(session_id)
        return store

    async def save(self, session_id: str, store: CartStore) -> None:
        """Persist the store. A closed empty cart is deleted instead."""
        if not store.items and not store.is_open:
            await self.repository.delete(session_id)
        else:
            await self.repository.save(session_id, store.to_dict())

    @asynccontextmanager
    async def session(self, session_id: str) -> AsyncIterator[CartStore]:
        """
        Load the session's cart, yield it, and save on clean exit if it changed.

        Nothing is written when the body raises.
        """
        store = await self.load(session_id)
        changes = []
        unsubscribe = store.subscribe(changes.append)
        try:
            yield store
        finally:
            unsubscribe()

        if changes:
            await self.save(session_id, store)
            get_session_logger(__name__, session_id).info(
                f"Saved: {store.item_count} item(s), total {store.total}"
            )


_cart_service: Optional[CartService] = None


def get_cart_service() -> CartService:
    """Get CartService singleton."""
    global _cart_service
    if _cart_service is None:
        _cart_service = CartService()
    return _cart_service
