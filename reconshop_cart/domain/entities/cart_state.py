"""
Cart state entity

Immutable snapshot of the cart: the ordered lines plus their aggregates.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Tuple

from reconshop_cart.domain.entities.cart_item import CartItem


@dataclass(frozen=True)
class CartTotals:
    """Aggregates derived from the cart lines"""

    total_items: int = 0
    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalItems": self.total_items,
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "total": str(self.total),
        }


@dataclass(frozen=True)
class CartState:
    """Cart lines in insertion order together with their totals"""

    items: Tuple[CartItem, ...] = ()
    totals: CartTotals = field(default_factory=CartTotals)

    @classmethod
    def empty(cls) -> "CartState":
        return cls()

    @property
    def total_items(self) -> int:
        return self.totals.total_items

    @property
    def subtotal(self) -> Decimal:
        return self.totals.subtotal

    @property
    def discount(self) -> Decimal:
        return self.totals.discount

    @property
    def total(self) -> Decimal:
        return self.totals.total

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> Dict[str, Any]:
        """Serialize items and aggregates"""
        return {
            "items": [item.to_dict() for item in self.items],
            **self.totals.to_dict(),
        }
