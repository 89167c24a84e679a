from __future__ import annotations

import os

from roof_proposals.api import create_app
from roof_proposals.firestore_pricing_config_store import FirestorePricingConfigStore
from roof_proposals.firestore_proposal_store import FirestoreProposalStore
from roof_proposals.logging_config import setup_logging
from roof_proposals.pricing_config_store import PricingConfigStore
from roof_proposals.proposal_store import ProposalStore

# Environment configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
PROJECT_ID = os.getenv("PROJECT_ID")

setup_logging(environment=ENVIRONMENT, project_id=PROJECT_ID)

# Use Firestore in production, in-memory (seeded with the stock tiers) for dev
if ENVIRONMENT == "dev":
    proposal_store = ProposalStore()
    pricing_config_store = PricingConfigStore(seed_defaults=True)
else:
    proposal_store = FirestoreProposalStore(project_id=PROJECT_ID)
    pricing_config_store = FirestorePricingConfigStore(project_id=PROJECT_ID)

app = create_app(proposals=proposal_store, pricing_config=pricing_config_store, project_id=PROJECT_ID)
