"""
Application DTOs
"""

from .order_dtos import CheckoutSnapshot, OrderItemInfo, build_checkout_snapshot

__all__ = ["CheckoutSnapshot", "OrderItemInfo", "build_checkout_snapshot"]
