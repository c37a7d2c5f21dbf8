"""
In-memory cart store for a single browsing session.

CartStore is the only writer of its CartState. Presentation code reads
snapshots, either by calling snapshot() or by subscribing:

    store = CartStore()
    unsubscribe = store.subscribe(render_sidebar)
    store.add_item(product, quantity=2)   # render_sidebar(snapshot) runs here
    unsubscribe()

Every mutator finishes updating state before listeners run, so a listener
never sees stale totals.
"""
from collections.abc import Mapping
from dataclasses import replace
from typing import Callable, List, Optional, Union

from pydantic import ValidationError

from storefront.errors import (
    CartValidationError,
    ERROR_INVALID_CART_DATA,
    ERROR_INVALID_NEW_QUANTITY,
    ERROR_INVALID_PRODUCT,
    ERROR_INVALID_PRODUCT_ID,
    ERROR_INVALID_QUANTITY,
    ERROR_INVALID_VARIANT_ID,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import Product
from .models import CartSnapshot, CartState, LineItem

logger = get_logger(__name__)

Listener = Callable[[CartSnapshot], None]


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_product_id(product_id) -> str:
    # Stripped like Product.id, so remove/update match what add stored
    if not isinstance(product_id, str) or not product_id.strip():
        raise CartValidationError(ERROR_INVALID_PRODUCT_ID)
    return product_id.strip()


def _check_variant_id(variant_id) -> Optional[str]:
    if variant_id is None:
        return None
    if not isinstance(variant_id, str) or not variant_id.strip():
        raise CartValidationError(ERROR_INVALID_VARIANT_ID)
    return variant_id.strip()


def _coerce_product(product: Union[Product, Mapping]) -> Product:
    if isinstance(product, Product):
        return product
    if not isinstance(product, Mapping):
        raise CartValidationError(f"{ERROR_INVALID_PRODUCT}: expected a product, got {type(product).__name__}")
    try:
        return Product.model_validate(dict(product))
    except ValidationError as e:
        raise CartValidationError(f"{ERROR_INVALID_PRODUCT}: {e.error_count()} invalid field(s)") from e


class CartStore:
    """
    Owns one session's cart.

    Args:
        state: Initial state; a fresh empty cart when omitted.
        open_on_add: Show the cart panel whenever an item is added.
    """

    def __init__(self, state: Optional[CartState] = None, open_on_add: bool = False):
        self._state = state if state is not None else CartState()
        self._listeners: List[Listener] = []
        self.open_on_add = open_on_add

    # ---- reading ----

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot.of(self._state)

    @property
    def items(self):
        return tuple(self._state.items)

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def item_count(self) -> int:
        return self._state.item_count

    @property
    def total(self):
        return self._state.total

    def to_dict(self) -> dict:
        return self._state.to_dict()

    # ---- subscriptions ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with a fresh snapshot after every mutation.

        Returns:
            Function that removes the listener. Calling it again does nothing.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        # Copy: a listener may unsubscribe itself
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Cart listener {listener!r} failed: {e}", exc_info=True)

    # ---- item mutations ----

    def add_item(
        self,
        product: Union[Product, Mapping],
        quantity: int = 1,
        variant_id: Optional[str] = None,
    ) -> CartSnapshot:
        """
        Add units of a product/variant.

        An existing line with the same product and variant is incremented in
        place, keeping its position; otherwise a new line is appended. Either
        way the line takes the product's current name, image and prices.

        Raises:
            CartValidationError: malformed product, or quantity not an int >= 1.
        """
        if not _is_int(quantity) or quantity < 1:
            raise CartValidationError(ERROR_INVALID_QUANTITY)
        variant_id = _check_variant_id(variant_id)
        product = _coerce_product(product)

        index = self._state.find(product.id, variant_id)
        if index is not None:
            existing = self._state.items[index]
            # Re-adding refreshes the display snapshot
            self._state.items[index] = replace(
                existing,
                name=product.name,
                image=product.image,
                price=product.price,
                original_price=product.original_price,
                quantity=existing.quantity + quantity,
            )
        else:
            self._state.items.append(
                LineItem(
                    product_id=product.id,
                    variant_id=variant_id,
                    name=product.name,
                    image=product.image,
                    price=product.price,
                    original_price=product.original_price,
                    quantity=quantity,
                )
            )

        if self.open_on_add:
            self._state.is_open = True

        logger.debug(
            f"Added {quantity} x {sanitize_id_for_logging(product.id)} "
            f"(variant={sanitize_id_for_logging(variant_id)}), count={self._state.item_count}"
        )
        self._notify()
        return self.snapshot()

    def remove_item(self, product_id: str, variant_id: Optional[str] = None) -> CartSnapshot:
        """Remove a line. Unknown product/variant is a no-op."""
        product_id = _check_product_id(product_id)
        variant_id = _check_variant_id(variant_id)

        index = self._state.find(product_id, variant_id)
        if index is None:
            return self.snapshot()

        del self._state.items[index]
        self._notify()
        return self.snapshot()

    def update_quantity(
        self,
        product_id: str,
        new_quantity: int,
        variant_id: Optional[str] = None,
    ) -> CartSnapshot:
        """
        Set a line's quantity to exactly new_quantity.

        Zero or negative removes the line. Unknown product/variant is a no-op.
        """
        product_id = _check_product_id(product_id)
        variant_id = _check_variant_id(variant_id)
        if not _is_int(new_quantity):
            raise CartValidationError(ERROR_INVALID_NEW_QUANTITY)

        if new_quantity <= 0:
            return self.remove_item(product_id, variant_id)

        index = self._state.find(product_id, variant_id)
        if index is None:
            return self.snapshot()

        existing = self._state.items[index]
        if existing.quantity != new_quantity:
            self._state.items[index] = replace(existing, quantity=new_quantity)
            self._notify()
        return self.snapshot()

    def clear_cart(self) -> CartSnapshot:
        """Empty the cart. Panel visibility is kept."""
        if not self._state.items:
            return self.snapshot()
        self._state.items.clear()
        self._notify()
        return self.snapshot()

    # ---- panel ----

    def open_cart(self) -> CartSnapshot:
        return self._set_open(True)

    def close_cart(self) -> CartSnapshot:
        return self._set_open(False)

    def toggle_cart(self) -> CartSnapshot:
        return self._set_open(not self._state.is_open)

    def _set_open(self, is_open: bool) -> CartSnapshot:
        if self._state.is_open != is_open:
            self._state.is_open = is_open
            self._notify()
        return self.snapshot()

    # ---- persistence ----

    def hydrate(self, data: Mapping) -> CartSnapshot:
        """
        Replace state with a previously persisted to_dict() payload.

        Raises:
            CartValidationError: payload is not a valid cart. State is untouched.
        """
        try:
            state = CartState.from_dict(dict(data))
        except (KeyError, TypeError, ValueError) as e:
            raise CartValidationError(f"{ERROR_INVALID_CART_DATA}: {e}") from e

        seen = set()
        for item in state.items:
            if not item.product_id or item.quantity < 1 or item.price < 0 or item.key in seen:
                raise CartValidationError(f"{ERROR_INVALID_CART_DATA}: bad line {item.key!r}")
            seen.add(item.key)

        self._state = state
        self._notify()
        return self.snapshot()
