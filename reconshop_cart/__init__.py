"""
ReconShop cart engine

Shopping cart state, line identity, totals and local persistence for the
ReconShop storefront.
"""

from reconshop_cart.domain.entities.cart_item import CartItem, ProductSnapshot
from reconshop_cart.domain.entities.cart_state import CartState, CartTotals
from reconshop_cart.domain.services.identity import matches
from reconshop_cart.domain.services.totals import compute_totals
from reconshop_cart.domain.value_objects.variant import Variant, normalize_variant_part
from reconshop_cart.services.cart_store import CartStore

__version__ = "1.0.0"

__all__ = [
    "CartItem",
    "CartState",
    "CartStore",
    "CartTotals",
    "ProductSnapshot",
    "Variant",
    "compute_totals",
    "matches",
    "normalize_variant_part",
]
