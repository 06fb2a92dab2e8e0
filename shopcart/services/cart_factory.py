"""Builds carts on the memory or Redis backend with default observers."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from shopcart.core import redis_client
from shopcart.core.constants import (
    DEFAULT_CART_ID,
    DEFAULT_CATALOG_PREFIX,
    DEFAULT_SLOW_OPERATION_MS,
    USER_CART_ID_TEMPLATE,
)
from shopcart.core.exceptions import (
    ConfigurationException,
    InvalidArgumentException,
    ShopCartException,
    StorageException,
)
from shopcart.core.metrics import MetricsRegistry
from shopcart.domain.value_objects import CartBackend
from shopcart.integrations.cart_store import InMemoryCartStore, RedisCartStore
from shopcart.integrations.catalog import PriceCatalog, RedisPriceCatalog
from shopcart.services.cart import Cart
from shopcart.services.observers import (
    LoggingCartObserver,
    MetricsCartObserver,
    PerformanceCartObserver,
)

logger = logging.getLogger(__name__)


class CartFactory:
    """Creates carts and wires performance + logging observers onto each.

    Memory carts price against ``catalog``; Redis carts price against a
    RedisPriceCatalog on the same client.
    """

    def __init__(
        self,
        catalog: PriceCatalog,
        client: Any | None = None,
        *,
        backend: CartBackend | None = None,
        cart_ttl_seconds: int | None = None,
        catalog_prefix: str = DEFAULT_CATALOG_PREFIX,
        slow_operation_ms: float = DEFAULT_SLOW_OPERATION_MS,
        metrics_registry: MetricsRegistry | None = None,
        cart_logger: logging.Logger | None = None,
    ):
        if catalog is None:
            raise InvalidArgumentException("Price catalog is required", "catalog")
        self._catalog = catalog
        self._client = client
        self._backend = backend
        self._cart_ttl_seconds = cart_ttl_seconds
        self._catalog_prefix = catalog_prefix
        self._slow_operation_ms = slow_operation_ms
        self._metrics_registry = metrics_registry
        self._cart_logger = cart_logger

    @property
    def client(self) -> Any | None:
        return self._client

    def redis_catalog(self) -> RedisPriceCatalog:
        if self._client is None:
            raise ConfigurationException("Redis connection is not configured. Cannot use Redis catalog.")
        return RedisPriceCatalog(self._client, self._catalog_prefix)

    def _setup_observers(self, cart: Cart) -> Cart:
        cart.subscribe(PerformanceCartObserver(self._slow_operation_ms))
        cart.subscribe(LoggingCartObserver(self._cart_logger))
        if self._metrics_registry is not None:
            cart.subscribe(MetricsCartObserver(self._metrics_registry))
        return cart

    def create_cart(self, backend: CartBackend | str | None = None, cart_id: str = DEFAULT_CART_ID) -> Cart:
        """Create a cart on ``backend``; None picks the recommended backend."""
        if backend is None:
            backend = self._backend or self.recommended_backend()
        try:
            backend = CartBackend(backend)
        except ValueError:
            raise InvalidArgumentException(f"Unsupported backend type: {backend}", "backend") from None

        if backend is CartBackend.REDIS:
            return self.create_redis_cart(cart_id)
        return self._create_memory_cart(cart_id)

    def create_cart_with_catalog(self, catalog: PriceCatalog) -> Cart:
        if catalog is None:
            raise InvalidArgumentException("Price catalog is required", "catalog")
        return self._setup_observers(Cart(catalog, InMemoryCartStore()))

    def create_redis_cart(self, cart_id: str = DEFAULT_CART_ID) -> Cart:
        """Create a Redis-backed cart after checking the server answers PING.

        Raises:
            ConfigurationException: no Redis client was configured
            StorageException: the server does not respond
        """
        if self._client is None:
            raise ConfigurationException("Redis connection is not configured. Cannot create Redis cart.")
        if not self.is_redis_available():
            raise StorageException(f"Redis is not reachable. Cannot create Redis cart '{cart_id}'.")
        store = RedisCartStore(self._client, cart_id, ttl_seconds=self._cart_ttl_seconds)
        return self._setup_observers(Cart(self.redis_catalog(), store))

    def _create_memory_cart(self, cart_id: str = DEFAULT_CART_ID) -> Cart:
        return self._setup_observers(Cart(self._catalog, InMemoryCartStore(), cart_id))

    def create_user_carts(self, user_ids: Iterable[str]) -> dict[str, Cart]:
        """One cart per user; a failed Redis cart falls back to memory for that user only."""
        carts: dict[str, Cart] = {}
        for user_id in user_ids:
            if not isinstance(user_id, str) or not user_id.strip():
                continue
            try:
                if self._client is not None:
                    carts[user_id] = self.create_redis_cart(USER_CART_ID_TEMPLATE.format(user_id=user_id))
                else:
                    carts[user_id] = self._create_memory_cart(user_id)
            except ShopCartException as exc:
                logger.warning(
                    "Failed to create cart for user %s, using in-memory fallback: %s", user_id, exc
                )
                carts[user_id] = self._create_memory_cart(user_id)
        return carts

    def is_redis_available(self) -> bool:
        return redis_client.ping(self._client)

    def recommended_backend(self) -> CartBackend:
        return CartBackend.REDIS if self.is_redis_available() else CartBackend.MEMORY
