from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, EmailStr, Field


class ProposalInput(BaseModel):
    customer_name: str = Field(min_length=1, alias="customerName")
    address: str = Field(min_length=1)
    squares: float = Field(gt=0, allow_inf_nan=False, description="Roof size in squares (100 sq ft)")
    created_by: EmailStr = Field(alias="createdBy")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class ProposalUpdate(BaseModel):
    customer_name: str | None = Field(default=None, min_length=1, alias="customerName")
    address: str | None = Field(default=None, min_length=1)
    squares: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    updated_by: EmailStr = Field(alias="updatedBy")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True

    def changes(self) -> dict[str, Any]:
        """Fields to write, keyed by their stored names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Proposal(BaseModel):
    id: str
    customer_name: str = Field(alias="customerName")
    address: str
    squares: float = Field(gt=0, allow_inf_nan=False)
    created_by: str | None = Field(default=None, alias="createdBy")
    updated_by: str | None = Field(default=None, alias="updatedBy")
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=datetime.utcnow, alias="updatedAt")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "h3XkQ9b2LmP0aZ7yT1cV",
                "customerName": "Dana Whitfield",
                "address": "1418 Juniper Ct, Boise, ID 83702",
                "squares": 24.5,
                "createdBy": "sales@globalroofing.com",
                "updatedBy": "sales@globalroofing.com",
            }
        }


__all__ = ["Proposal", "ProposalInput", "ProposalUpdate"]
