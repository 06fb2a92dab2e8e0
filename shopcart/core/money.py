"""Money helpers: exact Decimal arithmetic for prices and totals."""
from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from shopcart.core.exceptions import InvalidArgumentException

MoneyLike = Union[str, int, float, Decimal]

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_money(value: MoneyLike) -> Decimal:
    """Convert a price-like value to Decimal without float drift.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")``.
    Raises InvalidArgumentException for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise InvalidArgumentException(f"Invalid money value: {value!r}", "price")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidArgumentException(f"Invalid money value: {value!r}", "price") from exc
    if not result.is_finite():
        raise InvalidArgumentException(f"Invalid money value: {value!r}", "price")
    return result


def line_total(price: MoneyLike, quantity: int) -> Decimal:
    return to_money(price) * quantity


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    total = ZERO
    for amount in amounts:
        total += amount
    return total


def round_money(value: MoneyLike) -> Decimal:
    """Round to cents (display only; totals stay exact)."""
    return to_money(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: MoneyLike, symbol: str = "$") -> str:
    return f"{symbol}{round_money(value):,.2f}"
