"""Custom exceptions for the cart library."""
from __future__ import annotations


class ShopCartException(Exception):
    """Base exception for all cart errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class InvalidArgumentException(ShopCartException, ValueError):
    """Rejected input: blank ids, non-positive quantities, unknown products."""

    def __init__(self, message: str, argument: str | None = None) -> None:
        super().__init__(message)
        self.argument = argument


class ProductNotFoundException(ShopCartException, LookupError):
    """Product is missing from the price catalog."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product '{product_id}' not found")
        self.product_id = product_id


class StorageException(ShopCartException):
    """Key-value transport or record (de)serialization failure."""

    pass


class ConfigurationException(ShopCartException):
    """Configuration errors."""

    pass


class ObserverException(ShopCartException):
    """Observer callback failure. Logged at the dispatch site, never raised."""

    def __init__(self, observer: object, operation: str, cause: BaseException) -> None:
        super().__init__(
            f"Observer {type(observer).__name__} failed during {operation}: {cause}"
        )
        self.observer = observer
        self.operation = operation
        self.cause = cause
