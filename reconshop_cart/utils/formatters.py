"""
Display formatting for cart amounts and counts
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "ILS": "₪"}

BADGE_CAP = 99


def format_price(amount: Union[int, float, Decimal], currency: str = "USD") -> str:
    """Round half-up to cents and prefix the currency symbol (or append the code)"""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    rounded = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol:
        return f"{symbol}{rounded:,.2f}"
    return f"{rounded:,.2f} {currency.upper()}"


def format_badge_count(count: int, cap: int = BADGE_CAP) -> str:
    """Mini-cart badge text; counts above ``cap`` show as e.g. "99+" """
    if count <= 0:
        return ""
    if count > cap:
        return f"{cap}+"
    return str(count)
