from datetime import datetime
from unittest.mock import MagicMock

import pytest

from roof_proposals.errors import NotFound
from roof_proposals.firestore_pricing_config_store import FirestorePricingConfigStore
from roof_proposals.firestore_proposal_store import FirestoreProposalStore
from roof_proposals.models.loan import LoanProductInput
from roof_proposals.models.proposal import ProposalInput, ProposalUpdate
from roof_proposals.models.tier import TierKind


def make_doc(doc_id, data, exists=True):
    doc = MagicMock()
    doc.id = doc_id
    doc.exists = exists
    doc.to_dict.return_value = data
    return doc


def make_client():
    client = MagicMock()
    collections = {}
    client.collection.side_effect = lambda name: collections.setdefault(name, MagicMock(name=name))
    return client, collections


def test_create_proposal_writes_stored_field_names():
    client, collections = make_client()
    doc_ref = collections.setdefault("proposals", MagicMock()).document.return_value
    doc_ref.id = "abc123"

    proposal = FirestoreProposalStore(client=client).create_proposal(
        ProposalInput(customer_name="Dana", address="1418 Juniper Ct", squares=20, created_by="sales@globalroofing.com")
    )

    assert proposal.id == "abc123"
    written = doc_ref.set.call_args.args[0]
    assert written["customerName"] == "Dana"
    assert written["squares"] == 20
    assert written["createdBy"] == written["updatedBy"] == "sales@globalroofing.com"
    assert "id" not in written


def test_get_missing_proposal_returns_none():
    client, collections = make_client()
    collection = collections.setdefault("proposals", MagicMock())
    collection.document.return_value.get.return_value = make_doc("gone", None, exists=False)

    assert FirestoreProposalStore(client=client).get_proposal("gone") is None


def test_update_missing_proposal_raises():
    client, collections = make_client()
    collection = collections.setdefault("proposals", MagicMock())
    collection.document.return_value.get.return_value = make_doc("gone", None, exists=False)

    with pytest.raises(NotFound):
        FirestoreProposalStore(client=client).update_proposal(
            "gone", ProposalUpdate(squares=4, updated_by="sales@globalroofing.com")
        )


def test_update_proposal_sends_partial_changes():
    client, collections = make_client()
    doc_ref = collections.setdefault("proposals", MagicMock()).document.return_value
    doc_ref.get.return_value = make_doc(
        "p1",
        {
            "customerName": "Dana",
            "address": "1418 Juniper Ct",
            "squares": 14,
            "createdBy": "sales@globalroofing.com",
            "updatedBy": "lead@globalroofing.com",
            "createdAt": datetime(2025, 5, 1),
            "updatedAt": datetime(2025, 5, 2),
        },
    )

    proposal = FirestoreProposalStore(client=client).update_proposal(
        "p1", ProposalUpdate(squares=14, updated_by="lead@globalroofing.com")
    )

    sent = doc_ref.update.call_args.args[0]
    assert set(sent) == {"squares", "updatedBy", "updatedAt"}
    assert proposal.squares == 14


def test_get_tiers_skips_unknown_kinds_and_flags_missing_prices(caplog):
    client, collections = make_client()
    collections.setdefault("roofing_options", MagicMock()).stream.return_value = [
        make_doc("good", {"type": "good", "title": "Standard", "pricePerSquare": 625, "pricePerSquareUnder16": 725}),
        make_doc("better", {"type": "better", "title": "Premium", "price": 770}),
        make_doc("platinum", {"type": "platinum", "pricePerSquare": 1200}),
    ]

    with caplog.at_level("WARNING"):
        tiers = FirestorePricingConfigStore(client=client).get_tiers()

    assert set(tiers) == {TierKind.good, TierKind.better}
    assert tiers[TierKind.better].price_per_square is None
    assert "missing price fields" in caplog.text
    assert "Skipping unusable tier record" in caplog.text


def test_reset_tiers_writes_all_kinds_in_one_batch():
    client, collections = make_client()
    collection = collections.setdefault("roofing_options", MagicMock())

    tiers = FirestorePricingConfigStore(client=client).reset_tiers(updated_by="admin@globalroofing.com")

    batch = client.batch.return_value
    assert batch.set.call_count == 3
    batch.commit.assert_called_once()
    assert {call.args[0] for call in collection.document.call_args_list} == {"good", "better", "best"}
    assert tiers[TierKind.best].price_per_square_under16 == 950


def test_list_loan_products_orders_by_term_and_skips_broken_records():
    client, collections = make_client()
    collections.setdefault("loan_options", MagicMock()).stream.return_value = [
        make_doc("a", {"name": "15 Year", "years": 15, "rate": 6.99}),
        make_doc("b", {"name": "Legacy", "term": 120, "rate": 5.99}),
        make_doc("c", {"name": "5 Year", "years": 5, "rate": 4.5, "minAmount": 5000, "maxAmount": 40000}),
        make_doc("d", {"name": "Broken", "years": -1, "rate": 3}),
    ]

    loans = FirestorePricingConfigStore(client=client).list_loan_products()

    assert [loan.id for loan in loans] == ["c", "a"]
    assert loans[0].max_amount == 40000


def test_create_loan_product_stores_input_fields():
    client, collections = make_client()
    doc_ref = collections.setdefault("loan_options", MagicMock()).document.return_value
    doc_ref.id = "loan1"

    loan = FirestorePricingConfigStore(client=client).create_loan_product(
        LoanProductInput(name="10 Year Fixed", years=10, rate=5.99, min_amount=10000)
    )

    assert loan.id == "loan1"
    assert doc_ref.set.call_args.args[0] == {
        "name": "10 Year Fixed",
        "years": 10,
        "rate": 5.99,
        "minAmount": 10000,
        "maxAmount": None,
        "description": "",
    }
