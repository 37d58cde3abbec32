"""
Domain entities package
"""

from .cart_item import CartItem, ProductSnapshot
from .cart_state import CartState, CartTotals

__all__ = ["CartItem", "CartState", "CartTotals", "ProductSnapshot"]
