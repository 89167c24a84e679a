from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, Field, NonNegativeFloat, PositiveInt, model_validator

# Upper bounds a loan product may be written with.
MAX_TERM_YEARS = 50
MAX_ANNUAL_RATE_PERCENT = 100.0


class LoanProductInput(BaseModel):
    name: str = Field(min_length=1)
    years: PositiveInt = Field(le=MAX_TERM_YEARS)
    rate: NonNegativeFloat = Field(
        le=MAX_ANNUAL_RATE_PERCENT, description="Annual interest rate in percent; 0 is interest-free"
    )
    min_amount: NonNegativeFloat | None = Field(default=None, alias="minAmount")
    max_amount: NonNegativeFloat | None = Field(default=None, alias="maxAmount")
    description: str = ""

    class Config:
        populate_by_name = True
        str_strip_whitespace = True

    @model_validator(mode="after")
    def _bounds_ordered(self) -> "LoanProductInput":
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise ValueError("minAmount must not exceed maxAmount")
        return self

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class LoanProduct(LoanProductInput):
    id: str

    def covers(self, amount: float) -> bool | None:
        """Whether ``amount`` falls inside the product's bounds.

        Bounds are informational only; ``None`` means the product has none.
        """
        if self.min_amount is None and self.max_amount is None:
            return None
        if self.min_amount is not None and amount < self.min_amount:
            return False
        if self.max_amount is not None and amount > self.max_amount:
            return False
        return True


def sort_loan_products(loan_products: Iterable[LoanProduct]) -> list[LoanProduct]:
    """Order loan products by ascending term, then name."""
    return sorted(loan_products, key=lambda loan: (loan.years, loan.name))


__all__ = [
    "LoanProduct",
    "LoanProductInput",
    "MAX_ANNUAL_RATE_PERCENT",
    "MAX_TERM_YEARS",
    "sort_loan_products",
]
