from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, EmailStr, Field, PositiveFloat, field_validator, model_validator

from ..errors import InvalidInput


class TierKind(str, Enum):
    good = "good"
    better = "better"
    best = "best"

    @classmethod
    def parse(cls, value: Any) -> "TierKind":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInput("type", f"unknown tier kind {value!r}") from None


class Tier(BaseModel):
    """A stored pricing tier as read back from the config store.

    Reading is lenient: legacy records wrote ``0`` or ``""`` for prices that
    were never filled in, and those read back as unset.
    """

    kind: TierKind = Field(alias="type")
    title: str = ""
    description: str = ""
    warranty: str = ""
    image: str = ""
    price_per_square: PositiveFloat | None = Field(default=None, alias="pricePerSquare")
    price_per_square_under16: PositiveFloat | None = Field(default=None, alias="pricePerSquareUnder16")
    updated_by: str | None = Field(default=None, alias="updatedBy")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    class Config:
        populate_by_name = True

    @field_validator("price_per_square", "price_per_square_under16", mode="before")
    @classmethod
    def _blank_price_is_unset(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, (int, float)) and value <= 0:
            return None
        return value

    @classmethod
    def from_record(cls, doc_id: str, data: Mapping[str, Any]) -> "Tier":
        kind = TierKind.parse(data.get("type") or data.get("kind") or doc_id)
        return cls.model_validate({**data, "type": kind})

    def to_record(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        data["type"] = self.kind.value
        return data


class TierInput(BaseModel):
    """Admin-submitted tier content. Both prices are required on write."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    warranty: str = Field(min_length=1)
    image: str = ""
    price_per_square: PositiveFloat = Field(alias="pricePerSquare")
    price_per_square_under16: PositiveFloat = Field(alias="pricePerSquareUnder16")
    updated_by: EmailStr | None = Field(default=None, alias="updatedBy")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True

    @model_validator(mode="after")
    def _small_jobs_cost_more(self) -> "TierInput":
        if self.price_per_square_under16 <= self.price_per_square:
            raise ValueError("pricePerSquareUnder16 must be higher than pricePerSquare")
        return self

    def to_tier(self, kind: TierKind, *, updated_at: datetime | None = None) -> Tier:
        return Tier(
            kind=kind,
            title=self.title,
            description=self.description,
            warranty=self.warranty,
            image=self.image,
            price_per_square=self.price_per_square,
            price_per_square_under16=self.price_per_square_under16,
            updated_by=self.updated_by,
            updated_at=updated_at,
        )


__all__ = ["Tier", "TierInput", "TierKind"]
