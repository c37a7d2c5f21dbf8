"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, List, Tuple

from storefront.money import to_decimal, parse_money, multiply, subtract


@dataclass(frozen=True)
class LineItem:
    """
    One distinct product/variant selection in the cart.

    Name, image and prices are copied from the product when it is added, so
    later catalog edits don't show up until the item is added again.
    """
    product_id: str
    name: str
    price: Decimal
    quantity: int
    image: str = ""
    variant_id: Optional[str] = None
    original_price: Optional[Decimal] = None

    def __post_init__(self):
        object.__setattr__(self, "price", to_decimal(self.price))
        if self.original_price is not None:
            object.__setattr__(self, "original_price", to_decimal(self.original_price))

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        """Identity of the line: same product and same variant (or both absent)."""
        return (self.product_id, self.variant_id)

    @property
    def line_total(self) -> Decimal:
        return multiply(self.price, self.quantity)

    @property
    def savings(self) -> Decimal:
        """Markdown against original_price for all units; zero when not on sale."""
        if self.original_price is None or self.original_price <= self.price:
            return Decimal("0")
        return multiply(subtract(self.original_price, self.price), self.quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "name": self.name,
            "image": self.image,
            "price": str(self.price),
            "original_price": str(self.original_price) if self.original_price is not None else None,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """
        Create from dictionary.

        Raises:
            ValueError: price is not a finite number or quantity is not an int
        """
        quantity = data["quantity"]
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValueError(f"quantity must be an integer, got {quantity!r}")
        variant_id = data.get("variant_id")
        if variant_id is not None and not isinstance(variant_id, str):
            raise ValueError(f"variant_id must be a string, got {variant_id!r}")
        original_price = data.get("original_price")
        return cls(
            product_id=str(data["product_id"]),
            variant_id=variant_id,
            name=data["name"],
            image=data.get("image", ""),
            price=parse_money(data["price"]),
            original_price=parse_money(original_price) if original_price is not None else None,
            quantity=quantity,
        )


@dataclass
class CartState:
    """
    Line items plus panel visibility. Aggregates are always derived from items.

    Aggregates are exact Decimal sums; rounding to cents happens only when
    amounts are displayed or serialized for the API.
    """
    items: List[LineItem] = field(default_factory=list)
    is_open: bool = False

    @property
    def item_count(self) -> int:
        """Total units in the cart, not distinct lines."""
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def savings(self) -> Decimal:
        return sum((item.savings for item in self.items), Decimal("0"))

    def find(self, product_id: str, variant_id: Optional[str] = None) -> Optional[int]:
        """Index of the line matching the identity rule, or None."""
        key = (product_id, variant_id)
        return next((i for i, item in enumerate(self.items) if item.key == key), None)

    def to_dict(self) -> dict:
        """
        Persisted shape.

        item_count and total are written for readers of the raw payload;
        from_dict recomputes them from items.
        """
        return {
            "items": [item.to_dict() for item in self.items],
            "is_open": self.is_open,
            "item_count": self.item_count,
            "total": str(self.total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartState":
        """Create from dictionary."""
        return cls(
            items=[LineItem.from_dict(item) for item in data.get("items", [])],
            is_open=bool(data.get("is_open", False)),
        )


@dataclass(frozen=True)
class CartSnapshot:
    """Read-only view handed to listeners and presentation code."""
    items: Tuple[LineItem, ...]
    is_open: bool
    item_count: int
    total: Decimal
    savings: Decimal = Decimal("0")

    @classmethod
    def of(cls, state: CartState) -> "CartSnapshot":
        return cls(
            items=tuple(state.items),
            is_open=state.is_open,
            item_count=state.item_count,
            total=state.total,
            savings=state.savings,
        )

    @property
    def is_empty(self) -> bool:
        return not self.items
