from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime
from typing import Dict, Mapping

from .defaults import DEFAULT_TIERS
from .errors import NotFound
from .models.loan import LoanProduct, LoanProductInput, sort_loan_products
from .models.tier import Tier, TierInput, TierKind

logger = logging.getLogger(__name__)


class PricingConfigStore:
    """In-memory tiers and loan products for local development and tests."""

    def __init__(self, *, seed_defaults: bool = False) -> None:
        self._tiers: Dict[TierKind, Tier] = {}
        self._loans: Dict[str, LoanProduct] = {}
        self._lock = threading.Lock()
        if seed_defaults:
            self.reset_tiers()

    def get_tiers(self) -> Mapping[TierKind, Tier]:
        with self._lock:
            return dict(self._tiers)

    def save_tier(self, kind: TierKind, data: TierInput) -> Tier:
        tier = data.to_tier(kind, updated_at=datetime.utcnow())
        with self._lock:
            self._tiers[kind] = tier
        logger.info("Saved tier", extra={"tier": kind.value, "updated_by": data.updated_by})
        return tier

    def reset_tiers(self, *, updated_by: str | None = None) -> Mapping[TierKind, Tier]:
        for kind, defaults in DEFAULT_TIERS.items():
            self.save_tier(kind, defaults.model_copy(update={"updated_by": updated_by}))
        return self.get_tiers()

    def list_loan_products(self) -> list[LoanProduct]:
        with self._lock:
            return sort_loan_products(self._loans.values())

    def get_loan_product(self, loan_id: str) -> LoanProduct | None:
        with self._lock:
            return self._loans.get(loan_id)

    def create_loan_product(self, data: LoanProductInput) -> LoanProduct:
        loan = LoanProduct(id=uuid.uuid4().hex[:20], **data.model_dump())
        with self._lock:
            self._loans[loan.id] = loan
        return loan

    def update_loan_product(self, loan_id: str, data: LoanProductInput) -> LoanProduct:
        with self._lock:
            if loan_id not in self._loans:
                raise NotFound("loan product", loan_id)
            loan = LoanProduct(id=loan_id, **data.model_dump())
            self._loans[loan_id] = loan
            return loan

    def delete_loan_product(self, loan_id: str) -> None:
        with self._lock:
            if self._loans.pop(loan_id, None) is None:
                raise NotFound("loan product", loan_id)


__all__ = ["PricingConfigStore"]
