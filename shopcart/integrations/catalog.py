"""Price catalogs: a fixed in-process table or product records in Redis."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

import redis
from pydantic import ValidationError

from shopcart.core.constants import DEFAULT_CATALOG, DEFAULT_CATALOG_PREFIX
from shopcart.core.exceptions import (
    InvalidArgumentException,
    ProductNotFoundException,
    StorageException,
)
from shopcart.core.money import MoneyLike, to_money
from shopcart.domain.cart_items import normalize_product_id, require_product_id
from shopcart.domain.entities import ProductRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class PriceCatalog(Protocol):
    """Price lookups the cart depends on. Ids are matched case-insensitively."""

    def get_price(self, product_id: str) -> Decimal:
        """Return the unit price or raise ProductNotFoundException."""
        ...

    def exists(self, product_id: str) -> bool:
        ...

    def get_all(self) -> dict[str, Decimal]:
        """Return a copy of every id -> price pair."""
        ...


class StaticPriceCatalog:
    """Fixed price table passed in at construction."""

    def __init__(self, prices: Mapping[str, MoneyLike]):
        if prices is None:
            raise InvalidArgumentException("Price table is required", "prices")
        table: dict[str, Decimal] = {}
        for product_id, price in prices.items():
            normalized = require_product_id(product_id)
            if normalized in table:
                raise InvalidArgumentException(
                    f"Duplicate product id '{product_id}' (normalizes to '{normalized}')", "prices"
                )
            amount = to_money(price)
            if amount < 0:
                raise InvalidArgumentException(f"Price for '{product_id}' cannot be negative", "price")
            table[normalized] = amount
        self._prices = table

    @classmethod
    def default(cls) -> StaticPriceCatalog:
        return cls({product_id: price for product_id, (price, _, _) in DEFAULT_CATALOG.items()})

    def get_price(self, product_id: str) -> Decimal:
        normalized = require_product_id(product_id)
        try:
            return self._prices[normalized]
        except KeyError:
            raise ProductNotFoundException(product_id) from None

    def exists(self, product_id: str) -> bool:
        if not isinstance(product_id, str) or not product_id.strip():
            return False
        return normalize_product_id(product_id) in self._prices

    def get_all(self) -> dict[str, Decimal]:
        return dict(self._prices)

    def __len__(self) -> int:
        return len(self._prices)


class RedisPriceCatalog:
    """Catalog where each product is a JSON record under ``<prefix>:<id>``."""

    def __init__(self, client: Any, prefix: str = DEFAULT_CATALOG_PREFIX):
        if client is None:
            raise InvalidArgumentException("Redis client is required", "client")
        if not prefix or not prefix.strip():
            raise InvalidArgumentException("Catalog key prefix cannot be empty", "prefix")
        self._client = client
        self._prefix = prefix.strip()

    @property
    def prefix(self) -> str:
        return self._prefix

    def _product_key(self, normalized_id: str) -> str:
        return f"{self._prefix}:{normalized_id}"

    def _scan_keys(self) -> list[str]:
        keys = []
        for key in self._client.scan_iter(match=f"{self._prefix}:*"):
            keys.append(key.decode() if isinstance(key, (bytes, bytearray)) else str(key))
        return keys

    @staticmethod
    def _parse(raw: str | bytes) -> ProductRecord:
        try:
            return ProductRecord.from_json(raw)
        except (ValidationError, json.JSONDecodeError) as exc:
            raise StorageException(f"Failed to deserialize product data from Redis: {exc}") from exc

    def get_product(self, product_id: str) -> ProductRecord:
        normalized = require_product_id(product_id)
        try:
            raw = self._client.get(self._product_key(normalized))
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc
        if raw is None:
            raise ProductNotFoundException(product_id)
        return self._parse(raw)

    def get_price(self, product_id: str) -> Decimal:
        return self.get_product(product_id).price

    def exists(self, product_id: str) -> bool:
        if not isinstance(product_id, str) or not product_id.strip():
            return False
        try:
            return bool(self._client.exists(self._product_key(normalize_product_id(product_id))))
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc

    def get_all(self) -> dict[str, Decimal]:
        products: dict[str, Decimal] = {}
        key_prefix = f"{self._prefix}:"
        try:
            for key in self._scan_keys():
                raw = self._client.get(key)
                # deleted between SCAN and GET
                if raw is None:
                    continue
                products[key[len(key_prefix):]] = self._parse(raw).price
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc
        return products

    def add_or_update(
        self,
        product_id: str,
        price: MoneyLike,
        name: str | None = None,
        description: str | None = None,
    ) -> ProductRecord:
        normalized = require_product_id(product_id)
        amount = to_money(price)
        if amount < 0:
            raise InvalidArgumentException("Price cannot be negative", "price")

        record = ProductRecord(
            id=normalized,
            price=amount,
            name=name if name is not None else product_id,
            description=description,
        )
        try:
            self._client.set(self._product_key(normalized), record.to_json())
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc
        return record

    def remove(self, product_id: str) -> bool:
        if not isinstance(product_id, str) or not product_id.strip():
            return False
        try:
            return bool(self._client.delete(self._product_key(normalize_product_id(product_id))))
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc

    def clear(self) -> int:
        """Delete every product under the prefix and return how many went."""
        try:
            keys = self._scan_keys()
            if not keys:
                return 0
            return int(self._client.delete(*keys))
        except redis.RedisError as exc:
            raise StorageException(f"Redis operation failed: {exc}") from exc

    def initialize_defaults(self) -> None:
        for product_id, (price, name, description) in DEFAULT_CATALOG.items():
            self.add_or_update(product_id, price, name, description)
        logger.info("Seeded %d default products under '%s:*'", len(DEFAULT_CATALOG), self._prefix)
