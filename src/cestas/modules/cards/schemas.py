"""
Cestas Cards - Schemas.

Pydantic models for card operations.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator


class CardCreate(BaseModel):
    """Request to create a card."""

    name: str = Field(..., max_length=200)
    description: str | None = None
    image_url: str | None = None


class CardUpdate(BaseModel):
    """Request to update a card. Only fields that are sent are written."""

    name: str | None = Field(default=None, max_length=200)
    description: str | None = None
    image_url: str | None = None


class CardResponse(BaseModel):
    """Card response."""

    id: str
    name: str
    description: str | None = None
    image_url: str | None = None
    quantidade_produtos: int = 0
    valor_total: Decimal = Decimal("0")
    frete: Decimal = Decimal("0")
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> str:
        return str(v)

    @field_validator("valor_total", "frete", mode="before")
    @classmethod
    def _money(cls, v: Any) -> Any:
        if v is None or v == "":
            return Decimal("0")
        return Decimal(str(v)) if isinstance(v, float) else v

    @field_validator("quantidade_produtos", mode="before")
    @classmethod
    def _count(cls, v: Any) -> Any:
        return v or 0


class CardListResponse(BaseModel):
    """List of cards, newest first."""

    items: list[CardResponse]
    total: int
