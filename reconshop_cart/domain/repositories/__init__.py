"""
Domain repository interfaces
"""

from .cart_repository import CartRepository

__all__ = ["CartRepository"]
