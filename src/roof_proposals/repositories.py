from __future__ import annotations

from typing import Mapping, Protocol

from .models.loan import LoanProduct, LoanProductInput
from .models.proposal import Proposal, ProposalInput, ProposalUpdate
from .models.tier import Tier, TierInput, TierKind


class ProposalRepository(Protocol):
    def create_proposal(self, data: ProposalInput) -> Proposal:
        ...

    def get_proposal(self, proposal_id: str) -> Proposal | None:
        ...

    def update_proposal(self, proposal_id: str, changes: ProposalUpdate) -> Proposal:
        ...

    def delete_proposal(self, proposal_id: str) -> None:
        ...

    def list_proposals(self, *, created_by: str | None = None, limit: int = 100) -> list[Proposal]:
        ...


class PricingConfigRepository(Protocol):
    def get_tiers(self) -> Mapping[TierKind, Tier]:
        ...

    def save_tier(self, kind: TierKind, data: TierInput) -> Tier:
        ...

    def reset_tiers(self, *, updated_by: str | None = None) -> Mapping[TierKind, Tier]:
        ...

    def list_loan_products(self) -> list[LoanProduct]:
        ...

    def get_loan_product(self, loan_id: str) -> LoanProduct | None:
        ...

    def create_loan_product(self, data: LoanProductInput) -> LoanProduct:
        ...

    def update_loan_product(self, loan_id: str, data: LoanProductInput) -> LoanProduct:
        ...

    def delete_loan_product(self, loan_id: str) -> None:
        ...


__all__ = ["ProposalRepository", "PricingConfigRepository"]
