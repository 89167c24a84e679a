from __future__ import annotations

import logging
from datetime import datetime

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .errors import NotFound
from .models.proposal import Proposal, ProposalInput, ProposalUpdate

logger = logging.getLogger(__name__)


class FirestoreProposalStore:
    """Firestore-backed proposal store for production use."""

    COLLECTION_NAME = "proposals"

    def __init__(self, project_id: str | None = None, *, client: firestore.Client | None = None) -> None:
        self._db = client or firestore.Client(project=project_id)
        self._collection = self._db.collection(self.COLLECTION_NAME)

    def create_proposal(self, data: ProposalInput) -> Proposal:
        """Create a proposal under a Firestore auto-generated ID."""
        now = datetime.utcnow()
        doc_ref = self._collection.document()

        proposal = Proposal(
            id=doc_ref.id,
            customer_name=data.customer_name,
            address=data.address,
            squares=data.squares,
            created_by=data.created_by,
            updated_by=data.created_by,
            created_at=now,
            updated_at=now,
        )
        doc_ref.set(self._to_firestore_dict(proposal))

        logger.info(
            "Created proposal",
            extra={
                "proposal_id": proposal.id,
                "squares": proposal.squares,
                "created_by": proposal.created_by,
            },
        )

        return proposal

    def get_proposal(self, proposal_id: str) -> Proposal | None:
        doc = self._collection.document(proposal_id).get()

        if not doc.exists:
            return None

        return self._from_firestore_dict(doc.id, doc.to_dict())

    def update_proposal(self, proposal_id: str, changes: ProposalUpdate) -> Proposal:
        """Apply a partial edit; last write wins."""
        doc_ref = self._collection.document(proposal_id)
        if not doc_ref.get().exists:
            raise NotFound("proposal", proposal_id)

        update_data = {**changes.changes(), "updatedAt": datetime.utcnow()}
        doc_ref.update(update_data)

        logger.info(
            "Updated proposal",
            extra={
                "proposal_id": proposal_id,
                "fields": sorted(update_data),
                "updated_by": changes.updated_by,
            },
        )

        updated_doc = doc_ref.get()
        return self._from_firestore_dict(updated_doc.id, updated_doc.to_dict())

    def delete_proposal(self, proposal_id: str) -> None:
        doc_ref = self._collection.document(proposal_id)
        if not doc_ref.get().exists:
            raise NotFound("proposal", proposal_id)
        doc_ref.delete()
        logger.info("Deleted proposal", extra={"proposal_id": proposal_id})

    def list_proposals(self, *, created_by: str | None = None, limit: int = 100) -> list[Proposal]:
        """List proposals, newest first."""
        query = self._collection

        if created_by is not None:
            query = query.where(filter=FieldFilter("createdBy", "==", created_by))

        query = query.order_by("createdAt", direction=firestore.Query.DESCENDING).limit(limit)

        return [self._from_firestore_dict(doc.id, doc.to_dict()) for doc in query.stream()]

    def _to_firestore_dict(self, proposal: Proposal) -> dict:
        return proposal.model_dump(by_alias=True, exclude={"id"})

    def _from_firestore_dict(self, proposal_id: str, data: dict) -> Proposal:
        return Proposal.model_validate({**data, "id": proposal_id})


__all__ = ["FirestoreProposalStore"]
