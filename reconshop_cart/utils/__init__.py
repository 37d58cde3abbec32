"""
Utility helpers
"""

from .formatters import format_badge_count, format_price

__all__ = ["format_badge_count", "format_price"]
