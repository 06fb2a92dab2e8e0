"""Tagged success/failure value returned by cart use cases."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from shopcart.core.exceptions import (
    InvalidArgumentException,
    ProductNotFoundException,
    StorageException,
)

T = TypeVar("T")


class CartErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    STORAGE_FAILURE = "storage_failure"


ERROR_KINDS: tuple[tuple[type[Exception], CartErrorKind], ...] = (
    (InvalidArgumentException, CartErrorKind.INVALID_ARGUMENT),
    (ProductNotFoundException, CartErrorKind.NOT_FOUND),
    (StorageException, CartErrorKind.STORAGE_FAILURE),
)


@dataclass(frozen=True, slots=True)
class CartResult(Generic[T]):
    ok: bool
    value: T | None = None
    error_kind: CartErrorKind | None = None
    error: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> CartResult[T]:
        return cls(True, value)

    @classmethod
    def failure(cls, exc: Exception) -> CartResult[T]:
        for exc_type, kind in ERROR_KINDS:
            if isinstance(exc, exc_type):
                return cls(False, error_kind=kind, error=getattr(exc, "message", str(exc)))
        raise TypeError(f"No error kind for {type(exc).__name__}") from exc
