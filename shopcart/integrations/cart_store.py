"""Cart item persistence: in-process memory or Redis with TTL."""
from __future__ import annotations

import json
import logging
from typing import Any, Protocol, runtime_checkable

import redis

from shopcart.core.constants import CART_KEY_PREFIX, DEFAULT_CART_ID
from shopcart.core.exceptions import InvalidArgumentException, StorageException
from shopcart.domain.cart_items import CartItemMap, require_cart_id

logger = logging.getLogger(__name__)


@runtime_checkable
class CartStore(Protocol):
    """Persistence strategy behind a single cart's item mapping."""

    def load(self) -> CartItemMap:
        """Return a fresh copy of the stored mapping (empty if none)."""
        ...

    def save(self, items: CartItemMap) -> None:
        """Replace the stored mapping; an empty mapping removes the record."""
        ...

    def clear(self) -> None:
        """Remove every item."""
        ...


class InMemoryCartStore:
    """Mapping kept in process memory. Not synchronized: one thread per cart."""

    def __init__(self, items: CartItemMap | None = None):
        self._items: CartItemMap = dict(items or {})

    def load(self) -> CartItemMap:
        return dict(self._items)

    def save(self, items: CartItemMap) -> None:
        self._items = {product_id: qty for product_id, qty in items.items() if qty > 0}

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class RedisCartStore:
    """Cart mapping persisted in Redis as a flat JSON object under ``cart:<id>``.

    Every mutation is ``load -> change -> save`` with no lock or WATCH, so two
    writers on the same cart id can lose an update. Empty carts delete the key.
    When ``ttl_seconds`` is set each write refreshes the expiry; otherwise a
    write keeps whatever TTL the key already had (Redis 6+ ``KEEPTTL``).
    """

    def __init__(self, client: Any, cart_id: str = DEFAULT_CART_ID, ttl_seconds: int | None = None):
        if client is None:
            raise InvalidArgumentException("Redis client is required", "client")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise InvalidArgumentException("TTL must be positive", "ttl_seconds")
        self._client = client
        self._cart_id = require_cart_id(cart_id)
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def _cart_key(cart_id: str) -> str:
        return f"{CART_KEY_PREFIX}:{cart_id}"

    @property
    def cart_id(self) -> str:
        return self._cart_id

    @property
    def key(self) -> str:
        return self._cart_key(self._cart_id)

    @property
    def ttl_seconds(self) -> int | None:
        return self._ttl_seconds

    @staticmethod
    def _decode(raw: str | bytes) -> CartItemMap:
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as exc:
            raise StorageException(f"Failed to deserialize cart data from Redis: {exc}") from exc
        if not isinstance(payload, dict):
            raise StorageException("Cart record must be a JSON object")

        items: CartItemMap = {}
        for product_id, quantity in payload.items():
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                raise StorageException(
                    f"Cart record has invalid quantity {quantity!r} for '{product_id}'"
                )
            items[str(product_id)] = quantity
        return items

    def load(self) -> CartItemMap:
        try:
            raw = self._client.get(self.key)
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc
        if raw is None:
            return {}
        return self._decode(raw)

    def save(self, items: CartItemMap) -> None:
        if not items:
            self.clear()
            return

        try:
            serialized = json.dumps(items, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StorageException(f"Failed to serialize cart data for Redis: {exc}") from exc

        try:
            if self._ttl_seconds:
                self._client.set(self.key, serialized, ex=self._ttl_seconds)
            else:
                self._client.set(self.key, serialized, keepttl=True)
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc

    def clear(self) -> None:
        try:
            self._client.delete(self.key)
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc

    def expire(self, seconds: int) -> bool:
        """Set the record's time to live.

        Returns:
            False when there is no record to expire (empty cart)
        """
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds <= 0:
            raise InvalidArgumentException("Expiry must be a positive number of seconds", "seconds")
        try:
            return bool(self._client.expire(self.key, seconds))
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc

    def ttl(self) -> int | None:
        """Remaining time to live in seconds, or None if absent or persistent."""
        try:
            remaining = self._client.ttl(self.key)
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc
        # -2: no key, -1: no expiry
        if remaining is None or remaining < 0:
            return None
        return int(remaining)
