"""Use cases: cart operations reported as CartResult values."""
from __future__ import annotations

from decimal import Decimal

from shopcart.application.cart.result import CartResult
from shopcart.core.exceptions import (
    InvalidArgumentException,
    ProductNotFoundException,
    StorageException,
)
from shopcart.domain.cart_items import CartItemMap
from shopcart.services.cart import Cart

_EXPECTED = (InvalidArgumentException, ProductNotFoundException, StorageException)


def add_item(product_id: str, quantity: int, *, cart: Cart) -> CartResult[int]:
    """Value is the accumulated quantity for the product."""
    try:
        return CartResult.success(cart.add_item(product_id, quantity))
    except _EXPECTED as exc:
        return CartResult.failure(exc)


def remove_item(product_id: str, *, cart: Cart) -> CartResult[bool]:
    try:
        return CartResult.success(cart.remove_item(product_id))
    except _EXPECTED as exc:
        return CartResult.failure(exc)


def cart_total(*, cart: Cart) -> CartResult[Decimal]:
    try:
        return CartResult.success(cart.total())
    except _EXPECTED as exc:
        return CartResult.failure(exc)


def cart_items(*, cart: Cart) -> CartResult[CartItemMap]:
    try:
        return CartResult.success(cart.items())
    except _EXPECTED as exc:
        return CartResult.failure(exc)


def clear_cart(*, cart: Cart) -> CartResult[None]:
    try:
        cart.clear()
    except _EXPECTED as exc:
        return CartResult.failure(exc)
    return CartResult.success()
