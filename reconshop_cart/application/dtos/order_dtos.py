"""
Order DTOs

Read-only checkout handoff built from a cart state. The order subsystem adds
shipping and tax on top of these values; the cart engine does not.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from reconshop_cart.domain.entities.cart_item import CartItem
from reconshop_cart.domain.entities.cart_state import CartState
from reconshop_cart.domain.services.totals import (
    effective_unit_price,
    line_discount,
    line_subtotal,
)
from reconshop_cart.infrastructure.utilities.exceptions import CartEmptyError


@dataclass(frozen=True)
class OrderItemInfo:
    """Order line frozen at checkout time"""

    product_id: int
    title: str
    image: str
    unit_price: Decimal
    effective_unit_price: Decimal
    quantity: int
    subtotal: Decimal
    discount: Decimal
    size: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def from_cart_item(cls, item: CartItem) -> "OrderItemInfo":
        """Create OrderItemInfo from a cart line."""
        return cls(
            product_id=item.product_id,
            title=item.title,
            image=item.image,
            unit_price=item.unit_price,
            effective_unit_price=effective_unit_price(item),
            quantity=item.quantity,
            subtotal=line_subtotal(item),
            discount=line_discount(item),
            size=item.variant.size,
            color=item.variant.color,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "productId": self.product_id,
            "title": self.title,
            "image": self.image,
            "price": str(self.effective_unit_price),
            "originalPrice": str(self.unit_price),
            "quantity": self.quantity,
            "subtotal": str(self.subtotal),
        }
        variant = {k: v for k, v in (("size", self.size), ("color", self.color)) if v is not None}
        if variant:
            data["variant"] = variant
        return data


@dataclass(frozen=True)
class CheckoutSnapshot:
    """Cart contents and aggregates handed to the order subsystem"""

    items: Tuple[OrderItemInfo, ...]
    total_items: int
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    currency: str = "USD"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "totalItems": self.total_items,
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "total": str(self.total),
            "currency": self.currency,
        }


def build_checkout_snapshot(state: CartState, currency: str = "USD") -> CheckoutSnapshot:
    """
    Build the checkout handoff for ``state``.

    Raises:
        CartEmptyError: If the cart has no lines.
    """
    if state.is_empty:
        raise CartEmptyError()

    return CheckoutSnapshot(
        items=tuple(OrderItemInfo.from_cart_item(item) for item in state.items),
        total_items=state.total_items,
        subtotal=state.subtotal,
        discount=state.discount,
        total=state.total,
        currency=currency,
    )
