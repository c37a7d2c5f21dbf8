"""
Cart API Pydantic Models

Request bodies and the cart read model returned by every cart endpoint.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.models import Product


# ==================== REQUESTS ====================

class AddToCartRequest(BaseModel):
    product: Product
    quantity: int = 1
    variant_id: Optional[str] = None


class UpdateCartItemRequest(BaseModel):
    product_id: str
    quantity: int  # 0 or less removes the line
    variant_id: Optional[str] = None


# ==================== RESPONSES ====================

class LineItemResponse(BaseModel):
    product_id: str
    variant_id: Optional[str] = None
    name: str
    image: str = ""
    price: float
    original_price: Optional[float] = None
    quantity: int = Field(ge=1)
    line_total: float


class CartResponse(BaseModel):
    items: List[LineItemResponse] = []
    is_open: bool = False
    item_count: int = 0
    total: float = 0.0
    savings: float = 0.0
    currency: str = "INR"
    formatted_total: str = ""
