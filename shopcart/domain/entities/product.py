"""Catalog product record as persisted in Redis."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class ProductRecord(BaseModel):
    """Product entity stored as a lower camel case JSON object."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Normalized product id")
    price: Decimal = Field(..., ge=0, description="Unit price")
    name: Optional[str] = Field(None, description="Display name")
    description: Optional[str] = Field(None, description="Product description")
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write timestamp (UTC)",
    )

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v):
        """Route floats through str so stored numbers stay exact."""
        if isinstance(v, float):
            return str(v)
        return v

    @field_serializer("price", when_used="json")
    def serialize_price(self, price: Decimal) -> float:
        """Write the price as a JSON number."""
        return float(price)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> ProductRecord:
        return cls.model_validate_json(raw)
