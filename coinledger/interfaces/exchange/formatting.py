"""
Display formatting for monetary amounts.

Presentation only: the ledger keeps full precision.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def format_usd(amount: Decimal) -> str:
    """Render an amount as dollars with thousands separators.

    >>> format_usd(Decimal("12345.678"))
    '$12,345.68'
    """
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.2f}"
