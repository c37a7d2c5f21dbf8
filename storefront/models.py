"""
Catalog value objects consumed by the cart.

The catalog itself lives elsewhere; the cart only needs the fields below and
ignores anything else a product payload carries.
"""
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Product(BaseModel):
    """Product as handed to the cart by catalog pages."""

    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    id: str = Field(description="Product identifier", min_length=1)
    name: str = Field(description="Display name", min_length=1)
    price: Decimal = Field(description="Current unit price", ge=0)
    image: str = Field(default="", description="Primary image URL")
    stock: int = Field(default=0, description="Units in stock", ge=0)
    original_price: Optional[Decimal] = Field(
        default=None,
        description="Pre-sale unit price, if discounted",
        ge=0,
        validation_alias=AliasChoices("original_price", "originalPrice"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # Document stores hand out ObjectId-like values
        if value is not None and not isinstance(value, (str, bool)):
            return str(value)
        return value

    @field_validator("price", "original_price", mode="before")
    @classmethod
    def _float_via_str(cls, value):
        if isinstance(value, bool):
            raise ValueError("price must be a number")
        if isinstance(value, float):
            return str(value)
        return value

