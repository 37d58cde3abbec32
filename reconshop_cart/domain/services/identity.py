"""
Cart line identity matching

Two lines are the same purchasable unit when product id, size and color
match after normalization. ``None`` and ``""`` are the same "unset" value;
any other string is compared as-is (case-sensitive, no trimming).
"""

from typing import Optional, Sequence, Tuple, Union

from reconshop_cart.domain.entities.cart_item import CartItem, ProductSnapshot
from reconshop_cart.domain.value_objects.variant import normalize_variant_part

Line = Union[CartItem, ProductSnapshot]


def identity_of(
    product_id: int, size: Optional[str] = None, color: Optional[str] = None
) -> Tuple[int, Optional[str], Optional[str]]:
    """Build a normalized identity triple"""
    return (product_id, normalize_variant_part(size), normalize_variant_part(color))


def matches(a: Line, b: Line) -> bool:
    """True if both lines refer to the same product at the same variant"""
    return a.identity == b.identity


def find_line_index(
    items: Sequence[CartItem],
    product_id: int,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> int:
    """Index of the line with the given identity, or -1"""
    target = identity_of(product_id, size, color)
    for index, item in enumerate(items):
        if item.identity == target:
            return index
    return -1
