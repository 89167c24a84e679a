from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from .errors import InvalidInput, MissingConfiguration
from .formatting import format_currency, format_currency_with_cents
from .models.loan import LoanProduct, sort_loan_products
from .models.proposal import Proposal
from .models.quote import FinancingOption, ProposalQuote, TierQuote
from .models.tier import Tier, TierKind
from .pricing import amortize, resolve_price

logger = logging.getLogger(__name__)

TIER_ORDER: Sequence[TierKind] = (TierKind.good, TierKind.better, TierKind.best)


class QuoteBuilder:
    """Prices a job against every configured tier and loan product."""

    def build(
        self,
        proposal: Proposal,
        tiers: Mapping[TierKind, Tier],
        loan_products: Iterable[LoanProduct],
        *,
        selected_loans: Mapping[TierKind, str] | None = None,
    ) -> ProposalQuote:
        quote = self.build_for_squares(
            proposal.squares, tiers, loan_products, selected_loans=selected_loans
        )
        quote.proposal_id = proposal.id
        quote.customer_name = proposal.customer_name
        quote.address = proposal.address
        quote.summary_markdown = self._build_summary(proposal, quote)
        return quote

    def build_for_squares(
        self,
        squares: float,
        tiers: Mapping[TierKind, Tier],
        loan_products: Iterable[LoanProduct],
        *,
        selected_loans: Mapping[TierKind, str] | None = None,
    ) -> ProposalQuote:
        loans = sort_loan_products(loan_products)
        selected = self._check_selection(selected_loans or {}, loans)

        warnings: list[str] = []
        tier_quotes: list[TierQuote] = []
        for kind in TIER_ORDER:
            tier = tiers.get(kind)
            if tier is None:
                missing = MissingConfiguration("tier", kind.value)
                logger.warning("Tier missing from configuration", extra={"tier": kind.value})
                warnings.append(str(missing))
                continue
            tier_quotes.append(self._build_tier(tier, squares, loans, selected.get(kind)))

        return ProposalQuote(squares=squares, tiers=tier_quotes, warnings=warnings)

    def _check_selection(
        self, selected_loans: Mapping[TierKind, str], loans: Sequence[LoanProduct]
    ) -> dict[TierKind, str]:
        known = {loan.id for loan in loans}
        selection: dict[TierKind, str] = {}
        for kind, loan_id in selected_loans.items():
            if not loan_id:
                continue
            if loan_id not in known:
                raise MissingConfiguration("loan product", loan_id)
            selection[TierKind(kind)] = loan_id
        return selection

    def _build_tier(
        self,
        tier: Tier,
        squares: float,
        loans: Sequence[LoanProduct],
        selected_loan_id: str | None,
    ) -> TierQuote:
        price = resolve_price(tier, squares)
        warnings: list[str] = []
        if price.used_fallback:
            warnings.append(
                f"No price per square is configured for the {tier.kind.value} tier; "
                f"showing the default of {format_currency(price.price_per_square)}"
            )

        financing: list[FinancingOption] = []
        for loan in loans:
            try:
                financing.append(
                    self._build_financing(loan, price.total_price, loan.id == selected_loan_id)
                )
            except InvalidInput as exc:
                logger.warning(
                    "Loan product cannot be amortized",
                    extra={"tier": tier.kind.value, "loan_id": loan.id, "error": str(exc)},
                )
                warnings.append(f"Financing with {loan.name} is unavailable: {exc.message}")

        return TierQuote(
            kind=tier.kind,
            title=tier.title,
            description=tier.description,
            warranty=tier.warranty,
            image=tier.image,
            price_per_square=price.price_per_square,
            total_price=price.total_price,
            small_job_applied=price.small_job_applied,
            price_per_square_display=format_currency(price.price_per_square),
            total_price_display=format_currency(price.total_price),
            financing=financing,
            warnings=warnings,
        )

    def _build_financing(self, loan: LoanProduct, principal: float, selected: bool) -> FinancingOption:
        summary = amortize(principal, loan.rate, loan.years)
        return FinancingOption(
            loan_id=loan.id,
            name=loan.name,
            years=loan.years,
            rate=loan.rate,
            monthly_payment=summary.monthly_payment,
            total_paid=summary.total_paid,
            total_interest=summary.total_interest,
            monthly_payment_display=format_currency_with_cents(summary.monthly_payment),
            within_bounds=loan.covers(principal),
            selected=selected,
        )

    def _build_summary(self, proposal: Proposal, quote: ProposalQuote) -> str:
        lines = [
            "## Roofing Proposal",
            f"- Customer: {proposal.customer_name}",
            f"- Property: {proposal.address}",
            f"- Roof size: {proposal.squares:g} squares",
            "",
            "## Options",
        ]
        for tier in quote.tiers:
            lines.append(
                f"- {tier.title or tier.kind.value.title()}: {tier.total_price_display} "
                f"({tier.price_per_square_display} per square)"
            )
            chosen = next((option for option in tier.financing if option.selected), None)
            if chosen:
                lines.append(
                    f"  - Financing: {chosen.monthly_payment_display}/month, "
                    f"{chosen.years} years at {chosen.rate:g}%"
                )
        if not quote.tiers:
            lines.append("- None configured")
        if quote.warnings:
            lines.extend(["", "## Warnings", *(f"- {warning}" for warning in quote.warnings)])
        return "\n".join(lines)


__all__ = ["QuoteBuilder", "TIER_ORDER"]
