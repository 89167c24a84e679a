from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, Field

from .tier import TierKind


class FinancingOption(BaseModel):
    loan_id: str
    name: str
    years: int
    rate: float
    monthly_payment: float
    total_paid: float
    total_interest: float
    monthly_payment_display: str
    within_bounds: bool | None = Field(
        default=None, description="Informational: whether the price falls inside the product's min/max"
    )
    selected: bool = False


class TierQuote(BaseModel):
    kind: TierKind
    title: str
    description: str
    warranty: str
    image: str
    price_per_square: float
    total_price: float
    small_job_applied: bool
    price_per_square_display: str
    total_price_display: str
    financing: Sequence[FinancingOption] = Field(default_factory=list)
    warnings: Sequence[str] = Field(default_factory=list)


class ProposalQuote(BaseModel):
    proposal_id: str | None = None
    customer_name: str | None = None
    address: str | None = None
    squares: float
    tiers: Sequence[TierQuote] = Field(default_factory=list)
    warnings: Sequence[str] = Field(default_factory=list)
    summary_markdown: str = ""


__all__ = ["FinancingOption", "TierQuote", "ProposalQuote"]
