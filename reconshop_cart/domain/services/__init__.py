"""
Domain services: identity matching and totals calculation
"""

from .identity import find_line_index, identity_of, matches
from .totals import (
    compute_totals,
    effective_unit_price,
    line_discount,
    line_subtotal,
)

__all__ = [
    "compute_totals",
    "effective_unit_price",
    "find_line_index",
    "identity_of",
    "line_discount",
    "line_subtotal",
    "matches",
]
