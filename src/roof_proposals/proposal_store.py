from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import Dict

from .errors import NotFound
from .models.proposal import Proposal, ProposalInput, ProposalUpdate


class ProposalStore:
    def __init__(self) -> None:
        self._proposals: Dict[str, Proposal] = {}
        self._lock = threading.Lock()

    def create_proposal(self, data: ProposalInput) -> Proposal:
        with self._lock:
            now = datetime.utcnow()
            proposal = Proposal(
                id=uuid.uuid4().hex[:20],
                customer_name=data.customer_name,
                address=data.address,
                squares=data.squares,
                created_by=data.created_by,
                updated_by=data.created_by,
                created_at=now,
                updated_at=now,
            )
            self._proposals[proposal.id] = proposal
            return proposal

    def get_proposal(self, proposal_id: str) -> Proposal | None:
        with self._lock:
            return self._proposals.get(proposal_id)

    def update_proposal(self, proposal_id: str, changes: ProposalUpdate) -> Proposal:
        with self._lock:
            current = self._proposals.get(proposal_id)
            if current is None:
                raise NotFound("proposal", proposal_id)
            proposal = current.model_copy(
                update={
                    **changes.model_dump(exclude_none=True),
                    "updated_at": datetime.utcnow(),
                }
            )
            self._proposals[proposal_id] = proposal
            return proposal

    def delete_proposal(self, proposal_id: str) -> None:
        with self._lock:
            if self._proposals.pop(proposal_id, None) is None:
                raise NotFound("proposal", proposal_id)

    def list_proposals(self, *, created_by: str | None = None, limit: int = 100) -> list[Proposal]:
        with self._lock:
            proposals = [
                proposal
                for proposal in self._proposals.values()
                if created_by is None or proposal.created_by == created_by
            ]
        proposals.sort(key=lambda proposal: proposal.created_at, reverse=True)
        return proposals[:limit]


__all__ = ["ProposalStore"]
