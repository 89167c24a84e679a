from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import InvalidInput
from .models.tier import Tier, TierKind

logger = logging.getLogger(__name__)

# Jobs strictly below this many squares are billed at the small-job price.
SMALL_JOB_BREAKPOINT = 16

# Last-resort standard price per square when a tier record carries no price.
FALLBACK_PRICE_PER_SQUARE: Mapping[TierKind, float] = {
    TierKind.good: 625.0,
    TierKind.better: 770.0,
    TierKind.best: 850.0,
}


@dataclass(frozen=True)
class PriceResolution:
    price_per_square: float
    total_price: float
    small_job_applied: bool
    used_fallback: bool = False


@dataclass(frozen=True)
class LoanSummary:
    monthly_payment: float
    number_of_payments: int
    total_paid: float
    total_interest: float


@dataclass(frozen=True)
class ScheduleRow:
    month: int
    payment: float
    principal: float
    interest: float
    balance: float


def _finite(field: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidInput(field, "must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(field, "must be a number") from None
    if not math.isfinite(number):
        raise InvalidInput(field, "must be a finite number")
    return number


def _term_years(value: Any) -> int:
    years = _finite("term_years", value)
    if not years.is_integer() or years <= 0:
        raise InvalidInput("term_years", "must be a positive whole number of years")
    return int(years)


def resolve_price(tier: Tier, squares: float) -> PriceResolution:
    """Price a job of ``squares`` against ``tier``.

    Below the small-job breakpoint the small-job price applies when the tier
    has one; otherwise the standard price is used. A tier without a standard
    price is priced from ``FALLBACK_PRICE_PER_SQUARE`` and flagged through
    ``used_fallback``. No rounding is applied here.
    """
    squares = _finite("squares", squares)
    if squares <= 0:
        raise InvalidInput("squares", "must be greater than zero")

    if squares < SMALL_JOB_BREAKPOINT and tier.price_per_square_under16:
        return PriceResolution(
            price_per_square=tier.price_per_square_under16,
            total_price=tier.price_per_square_under16 * squares,
            small_job_applied=True,
        )

    if tier.price_per_square:
        price = tier.price_per_square
        used_fallback = False
    else:
        price = FALLBACK_PRICE_PER_SQUARE[tier.kind]
        used_fallback = True
        logger.warning(
            "Tier has no standard price, using fallback",
            extra={"tier": tier.kind.value, "fallback_price": price},
        )

    return PriceResolution(
        price_per_square=price,
        total_price=price * squares,
        small_job_applied=False,
        used_fallback=used_fallback,
    )


def monthly_payment(principal: float, annual_rate_percent: float, term_years: int) -> float:
    """Fixed monthly payment for a fully amortizing loan."""
    principal = _finite("principal", principal)
    if principal <= 0:
        raise InvalidInput("principal", "must be greater than zero")
    rate = _finite("annual_rate_percent", annual_rate_percent)
    if rate < 0:
        raise InvalidInput("annual_rate_percent", "must not be negative")
    payments = _term_years(term_years) * 12

    if rate == 0:
        return principal / payments

    monthly_rate = rate / 100 / 12
    try:
        growth_minus_one = math.expm1(payments * math.log1p(monthly_rate))
    except OverflowError:
        raise InvalidInput("term_years", "is too long to amortize at this rate") from None
    if growth_minus_one == 0:
        # Rate too small to register over the term.
        return principal / payments
    return principal * monthly_rate * (1 + growth_minus_one) / growth_minus_one


def amortize(principal: float, annual_rate_percent: float, term_years: int) -> LoanSummary:
    payment = monthly_payment(principal, annual_rate_percent, term_years)
    payments = int(term_years) * 12
    total_paid = payment * payments
    return LoanSummary(
        monthly_payment=payment,
        number_of_payments=payments,
        total_paid=total_paid,
        total_interest=total_paid - float(principal),
    )


def amortization_schedule(
    principal: float, annual_rate_percent: float, term_years: int
) -> list[ScheduleRow]:
    """Month-by-month split of each payment into interest and principal.

    The last row pays off whatever balance float drift has left, so the
    schedule always ends at zero.
    """
    payment = monthly_payment(principal, annual_rate_percent, term_years)
    monthly_rate = float(annual_rate_percent) / 100 / 12
    payments = int(term_years) * 12
    balance = float(principal)

    rows: list[ScheduleRow] = []
    for month in range(1, payments + 1):
        interest = balance * monthly_rate
        if month == payments:
            principal_part = balance
            amount = principal_part + interest
        else:
            principal_part = payment - interest
            amount = payment
        balance -= principal_part
        rows.append(
            ScheduleRow(
                month=month,
                payment=amount,
                principal=principal_part,
                interest=interest,
                balance=0.0 if month == payments else balance,
            )
        )
    return rows


__all__ = [
    "SMALL_JOB_BREAKPOINT",
    "FALLBACK_PRICE_PER_SQUARE",
    "PriceResolution",
    "LoanSummary",
    "ScheduleRow",
    "resolve_price",
    "monthly_payment",
    "amortize",
    "amortization_schedule",
]
