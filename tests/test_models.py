import pytest
from pydantic import ValidationError

from roof_proposals.errors import InvalidInput
from roof_proposals.models.loan import LoanProduct, LoanProductInput, sort_loan_products
from roof_proposals.models.proposal import ProposalInput, ProposalUpdate
from roof_proposals.models.tier import Tier, TierInput, TierKind


def tier_payload(**overrides):
    payload = {
        "title": "Standard Quality",
        "description": "3-tab asphalt shingles",
        "warranty": "20-year manufacturer warranty",
        "pricePerSquare": 625,
        "pricePerSquareUnder16": 725,
    }
    payload.update(overrides)
    return payload


def test_tier_kind_parse_rejects_unknown_kinds():
    assert TierKind.parse(" Better ") is TierKind.better
    with pytest.raises(InvalidInput) as excinfo:
        TierKind.parse("platinum")
    assert excinfo.value.field == "type"


def test_tier_reads_stored_field_names():
    tier = Tier.from_record(
        "good",
        {"type": "good", "title": "Standard", "pricePerSquare": 625, "pricePerSquareUnder16": 725},
    )

    assert tier.kind is TierKind.good
    assert tier.price_per_square == 625
    assert tier.price_per_square_under16 == 725


def test_tier_record_without_type_uses_document_id():
    assert Tier.from_record("best", {"pricePerSquare": 850}).kind is TierKind.best


@pytest.mark.parametrize("stored", [0, "", None])
def test_blank_stored_prices_read_as_unset(stored):
    tier = Tier.from_record("good", {"pricePerSquare": stored, "pricePerSquareUnder16": stored})

    assert tier.price_per_square is None
    assert tier.price_per_square_under16 is None


def test_tier_to_record_round_trips_stored_names():
    record = Tier(kind=TierKind.better, price_per_square=770, price_per_square_under16=870).to_record()

    assert record["type"] == "better"
    assert record["pricePerSquare"] == 770
    assert record["pricePerSquareUnder16"] == 870


def test_tier_input_requires_small_job_premium():
    with pytest.raises(ValidationError, match="pricePerSquareUnder16"):
        TierInput(**tier_payload(pricePerSquareUnder16=625))
    with pytest.raises(ValidationError):
        TierInput(**tier_payload(pricePerSquareUnder16=600))


@pytest.mark.parametrize("field", ["title", "description", "warranty"])
def test_tier_input_requires_display_text(field):
    with pytest.raises(ValidationError):
        TierInput(**tier_payload(**{field: "   "}))


def test_tier_input_requires_positive_prices():
    with pytest.raises(ValidationError):
        TierInput(**tier_payload(pricePerSquare=0))


def test_loan_product_bounds_are_informational():
    loan = LoanProduct(id="l1", name="10 Year Fixed", years=10, rate=5.99, minAmount=10000, maxAmount=50000)

    assert loan.covers(12500) is True
    assert loan.covers(9000) is False
    assert loan.covers(75000) is False
    assert LoanProduct(id="l2", name="Promo", years=1, rate=0).covers(1) is None


def test_loan_product_input_validation():
    with pytest.raises(ValidationError):
        LoanProductInput(name="Bad", years=0, rate=5)
    with pytest.raises(ValidationError):
        LoanProductInput(name="Bad", years=5, rate=-1)
    with pytest.raises(ValidationError, match="minAmount"):
        LoanProductInput(name="Bad", years=5, rate=5, minAmount=10, maxAmount=5)


def test_proposal_input_strips_and_validates():
    data = ProposalInput(
        customerName="  Dana Whitfield ",
        address=" 1418 Juniper Ct ",
        squares=24.5,
        createdBy="sales@globalroofing.com",
    )
    assert data.customer_name == "Dana Whitfield"
    assert data.address == "1418 Juniper Ct"

    with pytest.raises(ValidationError):
        ProposalInput(customerName="Dana", address="x", squares=0, createdBy="sales@globalroofing.com")
    with pytest.raises(ValidationError):
        ProposalInput(customerName="", address="x", squares=3, createdBy="sales@globalroofing.com")


def test_proposal_update_changes_use_stored_names():
    update = ProposalUpdate(squares=18, updatedBy="lead@globalroofing.com")

    assert update.changes() == {"squares": 18, "updatedBy": "lead@globalroofing.com"}


@pytest.mark.parametrize("overrides", [{"years": 51}, {"years": 100000}, {"rate": 101}])
def test_loan_product_input_rejects_unpayable_terms(overrides):
    payload = {"name": "Long Haul", "years": 30, "rate": 7.5, **overrides}
    with pytest.raises(ValidationError):
        LoanProductInput(**payload)


def test_sort_loan_products_orders_by_term_then_name():
    loans = [
        LoanProduct(id="b", name="B Fixed", years=10, rate=5),
        LoanProduct(id="c", name="Promo", years=1, rate=0),
        LoanProduct(id="a", name="A Fixed", years=10, rate=6),
    ]

    assert [loan.id for loan in sort_loan_products(loans)] == ["c", "a", "b"]
