from __future__ import annotations

import logging
from typing import Mapping

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

from .errors import InvalidInput, MissingConfiguration, NotFound
from .formatting import format_currency_with_cents
from .logging_config import TRACE_HEADER, set_trace_id, trace_id_from_header
from .models.loan import MAX_ANNUAL_RATE_PERCENT, MAX_TERM_YEARS, LoanProduct, LoanProductInput
from .models.proposal import Proposal, ProposalInput, ProposalUpdate
from .models.quote import ProposalQuote
from .models.tier import Tier, TierInput, TierKind
from .pricing import ScheduleRow, amortization_schedule, amortize
from .quote_builder import TIER_ORDER, QuoteBuilder
from .repositories import PricingConfigRepository, ProposalRepository

logger = logging.getLogger(__name__)


class CalculateQuoteRequest(BaseModel):
    squares: float = Field(gt=0, allow_inf_nan=False)
    selected_loans: Mapping[TierKind, str] = Field(default_factory=dict)


class AmortizeRequest(BaseModel):
    principal: float
    rate: float = Field(le=MAX_ANNUAL_RATE_PERCENT, description="Annual interest rate in percent")
    years: int = Field(le=MAX_TERM_YEARS)
    include_schedule: bool = False


class AmortizeResponse(BaseModel):
    monthly_payment: float
    number_of_payments: int
    total_paid: float
    total_interest: float
    monthly_payment_display: str
    total_paid_display: str
    total_interest_display: str
    schedule: list[ScheduleRow] | None = None


class ResetTiersRequest(BaseModel):
    updated_by: EmailStr | None = None


def create_app(
    *,
    proposals: ProposalRepository,
    pricing_config: PricingConfigRepository,
    quote_builder: QuoteBuilder | None = None,
    project_id: str | None = None,
) -> FastAPI:
    app = FastAPI(title="Roof Proposals API", version="0.1.0")
    builder = quote_builder or QuoteBuilder()

    @app.middleware("http")
    async def trace_requests(request: Request, call_next):
        set_trace_id(trace_id_from_header(request.headers.get(TRACE_HEADER), project_id=project_id))
        try:
            return await call_next(request)
        finally:
            set_trace_id(None)

    @app.exception_handler(InvalidInput)
    async def invalid_input(request: Request, exc: InvalidInput) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})

    @app.exception_handler(NotFound)
    async def not_found(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(MissingConfiguration)
    async def missing_configuration(request: Request, exc: MissingConfiguration) -> JSONResponse:
        logger.warning("Quote requested against missing configuration", extra={"kind": exc.kind, "key": exc.key})
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    # Proposals

    @app.post("/v1/proposals", response_model=Proposal, status_code=201)
    async def create_proposal(request: ProposalInput) -> Proposal:
        return proposals.create_proposal(request)

    @app.get("/v1/proposals", response_model=list[Proposal])
    async def list_proposals(
        created_by: str | None = None,
        limit: int = Query(default=100, ge=1, le=500),
    ) -> list[Proposal]:
        return proposals.list_proposals(created_by=created_by, limit=limit)

    @app.get("/v1/proposals/{proposal_id}", response_model=Proposal)
    async def get_proposal(proposal_id: str) -> Proposal:
        proposal = proposals.get_proposal(proposal_id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")
        return proposal

    @app.patch("/v1/proposals/{proposal_id}", response_model=Proposal)
    async def update_proposal(proposal_id: str, request: ProposalUpdate) -> Proposal:
        return proposals.update_proposal(proposal_id, request)

    @app.delete("/v1/proposals/{proposal_id}", status_code=204, response_class=Response)
    async def delete_proposal(proposal_id: str) -> Response:
        proposals.delete_proposal(proposal_id)
        return Response(status_code=204)

    @app.get("/v1/proposals/{proposal_id}/quote", response_model=ProposalQuote)
    async def get_quote(
        proposal_id: str,
        good: str | None = Query(default=None, description="Loan product ID selected for the good tier"),
        better: str | None = Query(default=None, description="Loan product ID selected for the better tier"),
        best: str | None = Query(default=None, description="Loan product ID selected for the best tier"),
    ) -> ProposalQuote:
        proposal = proposals.get_proposal(proposal_id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")
        selected = {
            kind: loan_id
            for kind, loan_id in zip(TIER_ORDER, (good, better, best))
            if loan_id
        }
        return builder.build(
            proposal,
            pricing_config.get_tiers(),
            pricing_config.list_loan_products(),
            selected_loans=selected,
        )

    # Pricing configuration

    @app.get("/v1/tiers", response_model=list[Tier])
    async def list_tiers() -> list[Tier]:
        tiers = pricing_config.get_tiers()
        return [tiers[kind] for kind in TIER_ORDER if kind in tiers]

    @app.put("/v1/tiers/{kind}", response_model=Tier)
    async def save_tier(kind: TierKind, request: TierInput) -> Tier:
        return pricing_config.save_tier(kind, request)

    @app.post("/v1/tiers:reset", response_model=list[Tier])
    async def reset_tiers(request: ResetTiersRequest | None = None) -> list[Tier]:
        tiers = pricing_config.reset_tiers(updated_by=request.updated_by if request else None)
        return [tiers[kind] for kind in TIER_ORDER]

    @app.get("/v1/loan-products", response_model=list[LoanProduct])
    async def list_loan_products() -> list[LoanProduct]:
        return pricing_config.list_loan_products()

    @app.post("/v1/loan-products", response_model=LoanProduct, status_code=201)
    async def create_loan_product(request: LoanProductInput) -> LoanProduct:
        return pricing_config.create_loan_product(request)

    @app.put("/v1/loan-products/{loan_id}", response_model=LoanProduct)
    async def update_loan_product(loan_id: str, request: LoanProductInput) -> LoanProduct:
        return pricing_config.update_loan_product(loan_id, request)

    @app.delete("/v1/loan-products/{loan_id}", status_code=204, response_class=Response)
    async def delete_loan_product(loan_id: str) -> Response:
        pricing_config.delete_loan_product(loan_id)
        return Response(status_code=204)

    # Ad-hoc calculations

    @app.post("/v1/quotes:calculate", response_model=ProposalQuote)
    async def calculate_quote(request: CalculateQuoteRequest) -> ProposalQuote:
        return builder.build_for_squares(
            request.squares,
            pricing_config.get_tiers(),
            pricing_config.list_loan_products(),
            selected_loans=request.selected_loans,
        )

    @app.post("/v1/loans:amortize", response_model=AmortizeResponse)
    async def amortize_loan(request: AmortizeRequest) -> AmortizeResponse:
        summary = amortize(request.principal, request.rate, request.years)
        schedule = None
        if request.include_schedule:
            schedule = amortization_schedule(request.principal, request.rate, request.years)
        return AmortizeResponse(
            monthly_payment=summary.monthly_payment,
            number_of_payments=summary.number_of_payments,
            total_paid=summary.total_paid,
            total_interest=summary.total_interest,
            monthly_payment_display=format_currency_with_cents(summary.monthly_payment),
            total_paid_display=format_currency_with_cents(summary.total_paid),
            total_interest_display=format_currency_with_cents(summary.total_interest),
            schedule=schedule,
        )

    @app.get("/health")
    async def healthcheck() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return app


__all__ = ["create_app"]
