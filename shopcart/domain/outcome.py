"""Outcome of one completed cart operation, as seen by observers."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shopcart.domain.value_objects import CartOperation


@dataclass(frozen=True, slots=True)
class OperationOutcome:
    operation: CartOperation
    elapsed: float  # seconds
    product_id: str | None = None
    quantity: int | None = None
    total: Decimal | None = None
    item_count: int | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
