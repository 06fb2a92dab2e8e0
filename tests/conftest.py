"""Shared pytest fixtures: an in-process Redis stand-in and catalogs."""
from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field

import pytest
import redis

from shopcart.integrations.catalog import RedisPriceCatalog, StaticPriceCatalog
from shopcart.services.observers import CartObserver


@dataclass
class FakeRedisClient:
    data: dict[str, str] = field(default_factory=dict)
    expiry: dict[str, int] = field(default_factory=dict)
    set_calls: list[tuple[str, int | None, bool]] = field(default_factory=list)
    available: bool = True

    def ping(self) -> bool:
        if not self.available:
            raise redis.ConnectionError("Connection refused")
        return True

    def get(self, key: str):
        return self.data.get(key)

    def set(self, key: str, value: str, ex: int | None = None, nx: bool = False, keepttl: bool = False):
        if nx and key in self.data:
            return None
        self.data[key] = value
        if ex is not None:
            self.expiry[key] = ex
        elif not keepttl:
            self.expiry.pop(key, None)
        self.set_calls.append((key, ex, keepttl))
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if key in self.data:
                removed += 1
            self.data.pop(key, None)
            self.expiry.pop(key, None)
        return removed

    def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self.data)

    def expire(self, key: str, seconds: int) -> bool:
        if key not in self.data:
            return False
        self.expiry[key] = seconds
        return True

    def ttl(self, key: str) -> int:
        if key not in self.data:
            return -2
        return self.expiry.get(key, -1)

    def scan_iter(self, match: str | None = None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key


class BrokenRedisClient:
    """Every command fails as if the server went away."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise redis.ConnectionError("Connection refused")

        return _fail


class RecordingObserver(CartObserver):
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def on_item_added(self, product_id, quantity, elapsed):
        self.events.append(("added", product_id, quantity))

    def on_item_removed(self, product_id, elapsed):
        self.events.append(("removed", product_id))

    def on_total_calculated(self, total, item_count, elapsed):
        self.events.append(("total", total, item_count))

    def on_items_retrieved(self, item_count, elapsed):
        self.events.append(("items", item_count))

    def on_cart_cleared(self, elapsed):
        self.events.append(("cleared",))

    def on_error(self, operation, error, elapsed):
        self.events.append(("error", operation, error, elapsed))


class ExplodingObserver(CartObserver):
    def __init__(self) -> None:
        self.calls = 0

    def _boom(self, *args, **kwargs):
        self.calls += 1
        raise RuntimeError("observer exploded")

    on_item_added = _boom
    on_item_removed = _boom
    on_total_calculated = _boom
    on_items_retrieved = _boom
    on_cart_cleared = _boom
    on_error = _boom


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture
def broken_redis() -> BrokenRedisClient:
    return BrokenRedisClient()


@pytest.fixture
def catalog() -> StaticPriceCatalog:
    return StaticPriceCatalog.default()


@pytest.fixture
def redis_catalog(fake_redis) -> RedisPriceCatalog:
    catalog = RedisPriceCatalog(fake_redis)
    catalog.initialize_defaults()
    return catalog


@pytest.fixture
def recorder() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def exploding() -> ExplodingObserver:
    return ExplodingObserver()

