"""
Domain value objects package

Contains immutable value objects that represent concepts in the cart domain.
"""

from .product_id import ProductId
from .variant import UNSET, Variant, normalize_variant_part

__all__ = [
    "ProductId",
    "UNSET",
    "Variant",
    "normalize_variant_part",
]
