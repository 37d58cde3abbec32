"""
Cart totals calculation

Pure functions over cart lines. Amounts are exact ``Decimal`` values;
rounding for display happens in ``reconshop_cart.utils.formatters``.
"""

from decimal import Decimal
from typing import Iterable

from reconshop_cart.domain.entities.cart_item import CartItem
from reconshop_cart.domain.entities.cart_state import CartTotals

HUNDRED = Decimal(100)
ZERO = Decimal(0)


def effective_unit_price(item: CartItem) -> Decimal:
    """Unit price after the line's percentage discount"""
    if not item.discount_percent:
        return item.unit_price
    return item.unit_price * (1 - Decimal(item.discount_percent) / HUNDRED)


def line_subtotal(item: CartItem) -> Decimal:
    """Discounted price for the whole line"""
    return effective_unit_price(item) * item.quantity


def line_discount(item: CartItem) -> Decimal:
    """Amount saved on the whole line"""
    return (item.unit_price - effective_unit_price(item)) * item.quantity


def compute_totals(items: Iterable[CartItem]) -> CartTotals:
    """
    Derive aggregates from the cart lines.

    Shipping and tax are not applied here, so ``total`` equals ``subtotal``.
    """
    total_items = 0
    subtotal = ZERO
    discount = ZERO

    for item in items:
        total_items += item.quantity
        subtotal += line_subtotal(item)
        discount += line_discount(item)

    return CartTotals(
        total_items=total_items,
        subtotal=subtotal,
        discount=discount,
        total=subtotal,
    )
