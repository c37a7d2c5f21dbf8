"""
Cart Router

Request/response API over the session cart. Each request loads the cart for
the X-Cart-Session header, applies one operation and saves it back.

Response format:
- Money as floats (Decimal internally)
- formatted_total in the configured display currency
"""
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from storefront.cart import CartService, CartSnapshot, CartStore, get_cart_service
from storefront.errors import (
    CartStorageError,
    CartValidationError,
    ERROR_CART_UNAVAILABLE,
    ERROR_INTERNAL,
    ERROR_MISSING_SESSION,
)
from storefront.logging import get_session_logger
from storefront.money import format_money, round_money, to_float
from .models import AddToCartRequest, CartResponse, LineItemResponse, UpdateCartItemRequest

DEFAULT_CURRENCY = "INR"

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_session_id(x_cart_session: Optional[str] = Header(default=None)) -> str:
    """Session id from the X-Cart-Session header."""
    if not x_cart_session or not x_cart_session.strip():
        raise HTTPException(status_code=400, detail=ERROR_MISSING_SESSION)
    return x_cart_session.strip()


def get_cart_currency() -> str:
    """Display currency from CART_CURRENCY."""
    return os.environ.get("CART_CURRENCY", DEFAULT_CURRENCY)


def _amount(value) -> float:
    """Exact Decimal to a cent-rounded float for the response."""
    return to_float(round_money(value))


def _format_cart_response(snapshot: CartSnapshot) -> CartResponse:
    currency = get_cart_currency()
    return CartResponse(
        items=[
            LineItemResponse(
                product_id=item.product_id,
                variant_id=item.variant_id,
                name=item.name,
                image=item.image,
                price=_amount(item.price),
                original_price=_amount(item.original_price) if item.original_price is not None else None,
                quantity=item.quantity,
                line_total=_amount(item.line_total),
            )
            for item in snapshot.items
        ],
        is_open=snapshot.is_open,
        item_count=snapshot.item_count,
        total=_amount(snapshot.total),
        savings=_amount(snapshot.savings),
        currency=currency,
        formatted_total=format_money(snapshot.total, currency),
    )


@asynccontextmanager
async def _cart_operation(service: CartService, session_id: str, action: str):
    """Open the session cart and translate domain errors to HTTP errors."""
    logger = get_session_logger(__name__, session_id)
    try:
        async with service.session(session_id) as store:
            yield store
    except HTTPException:
        raise
    except CartValidationError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except CartStorageError as se:
        logger.error(f"Failed to {action}: {se}")
        raise HTTPException(status_code=503, detail=ERROR_CART_UNAVAILABLE)
    except Exception as e:
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=ERROR_INTERNAL)


@router.get("", response_model=CartResponse)
async def get_cart(
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service),
):
    """Get the session's cart."""
    async with _cart_operation(service, session_id, "get cart") as store:
        snapshot = store.snapshot()
    return _format_cart_response(snapshot)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service),
):
    """Add units of a product (merges with an existing line of the same variant)."""
    async with _cart_operation(service, session_id, "add to cart") as store:
        snapshot = store.add_item(request.product, request.quantity, request.variant_id)
    return _format_cart_response(snapshot)


@router.patch("/items", response_model=CartResponse)
async def update_cart_item(
    request: UpdateCartItemRequest,
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service),
):
    """Set a line's quantity (0 = remove)."""
    async with _cart_operation(service, session_id, "update cart item") as store:
        snapshot = store.update_quantity(request.product_id, request.quantity, request.variant_id)
    return _format_cart_response(snapshot)


@router.delete("/items", response_model=CartResponse)
async def remove_cart_item(
    product_id: str,
    variant_id: Optional[str] = None,
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service),
):
    """Remove a line."""
    async with _cart_operation(service, session_id, "remove cart item") as store:
        snapshot = store.remove_item(product_id, variant_id)
    return _format_cart_response(snapshot)


async def _panel(service: CartService, session_id: str, action: str, op) -> CartResponse:
    async with _cart_operation(service, session_id, f"{action} cart") as store:
        snapshot = op(store)
    return _format_cart_response(snapshot)


@router.post("/open", response_model=CartResponse)
async def open_cart(
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service),
):
    return await _panel(service, session_id, "open", CartStore.open_cart)


@router.post("/close", response_model=CartResponse)
async def close_cart(
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service),
):
    return await _panel(service, session_id, "close", CartStore.close_cart)


@router.post("/toggle", response_model=CartResponse)
async def toggle_cart(
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service),
):
    return await _panel(service, session_id, "toggle", CartStore.toggle_cart)


@router.delete("", response_model=CartResponse)
async def clear_cart(
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service),
):
    """Empty the cart (e.g. after checkout)."""
    async with _cart_operation(service, session_id, "clear cart") as store:
        snapshot = store.clear_cart()
    return _format_cart_response(snapshot)
