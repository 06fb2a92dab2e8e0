"""Integrations package: cart persistence and price catalogs."""

from shopcart.integrations.cart_store import CartStore, InMemoryCartStore, RedisCartStore
from shopcart.integrations.catalog import PriceCatalog, RedisPriceCatalog, StaticPriceCatalog

__all__ = [
    "CartStore",
    "InMemoryCartStore",
    "RedisCartStore",
    "PriceCatalog",
    "StaticPriceCatalog",
    "RedisPriceCatalog",
]
