"""Cart use cases returning CartResult instead of raising."""

from .operations import add_item, cart_items, cart_total, clear_cart, remove_item
from .result import CartErrorKind, CartResult

__all__ = [
    "CartErrorKind",
    "CartResult",
    "add_item",
    "cart_items",
    "cart_total",
    "clear_cart",
    "remove_item",
]
