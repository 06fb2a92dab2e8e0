"""Value Objects for the cart domain."""
from __future__ import annotations

from enum import Enum


class CartOperation(str, Enum):
    """Public cart operations reported to observers."""

    ADD_ITEM = "add_item"
    REMOVE_ITEM = "remove_item"
    TOTAL = "total"
    ITEMS = "items"
    CLEAR = "clear"


class CartBackend(str, Enum):
    """Storage backends a cart can run on."""

    MEMORY = "memory"
    REDIS = "redis"
