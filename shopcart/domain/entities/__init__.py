"""Domain entities package."""

from .product import ProductRecord

__all__ = [
    "ProductRecord",
]
