from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

from google.cloud import firestore
from pydantic import ValidationError

from .defaults import DEFAULT_TIERS
from .errors import InvalidInput, NotFound
from .models.loan import LoanProduct, LoanProductInput, sort_loan_products
from .models.tier import Tier, TierInput, TierKind

logger = logging.getLogger(__name__)

# Stored keys that price resolution reads; renaming them would silently
# push every quote onto the fallback prices.
TIER_PRICE_FIELDS = ("pricePerSquare", "pricePerSquareUnder16")
LOAN_FIELDS = ("name", "rate", "years")


class FirestorePricingConfigStore:
    """Tiers and loan products shared by every proposal, stored in Firestore.

    Tiers live in ``roofing_options`` with one document per kind; loan
    products live in ``loan_options`` under generated IDs.
    """

    TIERS_COLLECTION = "roofing_options"
    LOANS_COLLECTION = "loan_options"

    def __init__(self, project_id: str | None = None, *, client: firestore.Client | None = None) -> None:
        self._db = client or firestore.Client(project=project_id)
        self._tiers = self._db.collection(self.TIERS_COLLECTION)
        self._loans = self._db.collection(self.LOANS_COLLECTION)

    def get_tiers(self) -> Mapping[TierKind, Tier]:
        """Read every tier document, skipping records that cannot be priced.

        Unknown kinds and malformed records are logged rather than raised so a
        single bad document does not take down every proposal view.
        """
        tiers: dict[TierKind, Tier] = {}
        for doc in self._tiers.stream():
            data = doc.to_dict() or {}
            try:
                tier = Tier.from_record(doc.id, data)
            except (InvalidInput, ValidationError) as exc:
                logger.warning(
                    "Skipping unusable tier record",
                    extra={"doc_id": doc.id, "error": str(exc)},
                )
                continue

            missing = [field for field in TIER_PRICE_FIELDS if field not in data]
            if missing:
                logger.warning(
                    "Tier record is missing price fields",
                    extra={"tier": tier.kind.value, "missing": missing},
                )
            tiers[tier.kind] = tier
        return tiers

    def save_tier(self, kind: TierKind, data: TierInput) -> Tier:
        """Overwrite the tier document for ``kind`` wholesale."""
        tier = data.to_tier(kind, updated_at=datetime.utcnow())
        self._tiers.document(kind.value).set(tier.to_record())

        logger.info("Saved tier", extra={"tier": kind.value, "updated_by": data.updated_by})

        return tier

    def reset_tiers(self, *, updated_by: str | None = None) -> Mapping[TierKind, Tier]:
        """Overwrite all three tiers with the stock content in one batch."""
        batch = self._db.batch()
        now = datetime.utcnow()
        tiers: dict[TierKind, Tier] = {}
        for kind, defaults in DEFAULT_TIERS.items():
            tier = defaults.model_copy(update={"updated_by": updated_by}).to_tier(kind, updated_at=now)
            batch.set(self._tiers.document(kind.value), tier.to_record())
            tiers[kind] = tier
        batch.commit()

        logger.info("Reset tiers to defaults", extra={"updated_by": updated_by})

        return tiers

    def list_loan_products(self) -> list[LoanProduct]:
        """List loan products ordered by ascending term.

        Ordering happens here rather than in the query so documents missing
        the ``years`` field still surface as integrity warnings.
        """
        loans: list[LoanProduct] = []
        for doc in self._loans.stream():
            loan = self._from_firestore_dict(doc.id, doc.to_dict() or {})
            if loan is not None:
                loans.append(loan)
        return sort_loan_products(loans)

    def get_loan_product(self, loan_id: str) -> LoanProduct | None:
        doc = self._loans.document(loan_id).get()
        if not doc.exists:
            return None
        return self._from_firestore_dict(doc.id, doc.to_dict() or {})

    def create_loan_product(self, data: LoanProductInput) -> LoanProduct:
        doc_ref = self._loans.document()
        doc_ref.set(data.to_record())

        logger.info("Created loan product", extra={"loan_id": doc_ref.id, "loan_name": data.name})

        return LoanProduct(id=doc_ref.id, **data.model_dump())

    def update_loan_product(self, loan_id: str, data: LoanProductInput) -> LoanProduct:
        doc_ref = self._loans.document(loan_id)
        if not doc_ref.get().exists:
            raise NotFound("loan product", loan_id)
        doc_ref.set(data.to_record())

        logger.info("Updated loan product", extra={"loan_id": loan_id, "loan_name": data.name})

        return LoanProduct(id=loan_id, **data.model_dump())

    def delete_loan_product(self, loan_id: str) -> None:
        doc_ref = self._loans.document(loan_id)
        if not doc_ref.get().exists:
            raise NotFound("loan product", loan_id)
        doc_ref.delete()
        logger.info("Deleted loan product", extra={"loan_id": loan_id})

    def _from_firestore_dict(self, loan_id: str, data: dict[str, Any]) -> LoanProduct | None:
        missing = [field for field in LOAN_FIELDS if field not in data]
        if missing:
            logger.warning(
                "Skipping loan product with missing fields",
                extra={"loan_id": loan_id, "missing": missing},
            )
            return None
        try:
            return LoanProduct.model_validate({**data, "id": loan_id})
        except ValidationError as exc:
            logger.warning(
                "Skipping invalid loan product",
                extra={"loan_id": loan_id, "error": str(exc)},
            )
            return None


__all__ = ["FirestorePricingConfigStore"]
