"""
Cart errors.

Message constants are shared between the domain layer and the routers so the
same wording reaches API clients and logs.
"""

# Input errors
ERROR_INVALID_PRODUCT = "Invalid product"
ERROR_INVALID_QUANTITY = "quantity must be a positive integer"
ERROR_INVALID_NEW_QUANTITY = "new_quantity must be an integer"
ERROR_INVALID_PRODUCT_ID = "product_id must be a non-empty string"
ERROR_INVALID_VARIANT_ID = "variant_id must be a non-empty string or None"
ERROR_INVALID_CART_DATA = "Invalid cart data"
ERROR_MISSING_SESSION = "X-Cart-Session header is required"

# Service errors
ERROR_CART_UNAVAILABLE = "Cart service unavailable"
ERROR_INTERNAL = "Internal server error"


class CartValidationError(ValueError):
    """Rejected cart input. State is left untouched."""


class CartStorageError(RuntimeError):
    """Cart persistence backend failed."""
