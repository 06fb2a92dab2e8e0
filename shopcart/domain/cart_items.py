"""Cart item mapping helpers: normalization and input guards."""
from __future__ import annotations

from shopcart.core.exceptions import InvalidArgumentException

# normalized product id -> quantity (always >= 1)
CartItemMap = dict[str, int]


def normalize_product_id(product_id: str) -> str:
    """Trim and case-fold a product id: ``" Apple "`` -> ``"apple"``."""
    return product_id.strip().casefold()


def require_product_id(product_id: object) -> str:
    """Validate and normalize a product id or raise InvalidArgumentException."""
    if not isinstance(product_id, str) or not product_id.strip():
        raise InvalidArgumentException("Product ID cannot be null or empty", "product_id")
    return normalize_product_id(product_id)


def require_quantity(quantity: object) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidArgumentException("Quantity must be an integer", "quantity")
    if quantity <= 0:
        raise InvalidArgumentException("Quantity must be greater than zero", "quantity")
    return quantity


def require_cart_id(cart_id: object) -> str:
    if not isinstance(cart_id, str) or not cart_id.strip():
        raise InvalidArgumentException("Cart ID cannot be null or empty", "cart_id")
    return cart_id.strip()
