"""Domain package."""

from .cart_items import CartItemMap, normalize_product_id, require_product_id, require_quantity
from .entities import ProductRecord
from .outcome import OperationOutcome
from .value_objects import CartBackend, CartOperation

__all__ = [
    # Entities
    "ProductRecord",
    # Value Objects
    "CartBackend",
    "CartItemMap",
    "CartOperation",
    "OperationOutcome",
    # Helpers
    "normalize_product_id",
    "require_product_id",
    "require_quantity",
]
