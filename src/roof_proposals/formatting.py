"""Dollar formatting for quote display.

Amounts are rounded half away from zero on the exact value of the float, the
way en-US currency formatting in the browser does it, so a quote rendered
here matches one rendered client-side to the cent.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal

from .errors import InvalidInput

CURRENCY_SYMBOL = "$"

# Wide enough to quantize any finite float without raising.
_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def _format(amount: float, places: int) -> str:
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise InvalidInput("amount", "must be a number")
    if not math.isfinite(amount):
        raise InvalidInput("amount", "must be a finite number")

    rounded = Decimal(amount).quantize(Decimal(1).scaleb(-places), context=_CONTEXT)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(rounded):,.{places}f}"


def format_currency(amount: float) -> str:
    """Whole dollars, e.g. ``$12,500``."""
    return _format(amount, 0)


def format_currency_with_cents(amount: float) -> str:
    """Dollars and cents, e.g. ``$138.71``."""
    return _format(amount, 2)


__all__ = ["CURRENCY_SYMBOL", "format_currency", "format_currency_with_cents"]
