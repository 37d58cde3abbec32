"""
Shared infrastructure utilities
"""

from .exceptions import (
    BusinessLogicError,
    CartEmptyError,
    PersistenceError,
    ReconShopCartError,
    ValidationError,
    validate_and_raise,
)

__all__ = [
    "BusinessLogicError",
    "CartEmptyError",
    "PersistenceError",
    "ReconShopCartError",
    "ValidationError",
    "validate_and_raise",
]
