"""
Application services
"""

from .cart_store import CartStore

__all__ = ["CartStore"]
