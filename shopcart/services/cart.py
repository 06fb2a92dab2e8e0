"""Shopping cart over a pluggable store, with observer notifications."""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from shopcart.core.constants import DEFAULT_CART_ID
from shopcart.core.exceptions import InvalidArgumentException, ObserverException
from shopcart.core.money import line_total, sum_money
from shopcart.domain.cart_items import CartItemMap, require_product_id, require_quantity
from shopcart.domain.outcome import OperationOutcome
from shopcart.domain.value_objects import CartOperation
from shopcart.integrations.cart_store import CartStore, InMemoryCartStore
from shopcart.integrations.catalog import PriceCatalog
from shopcart.services.observers import CartObserver

logger = logging.getLogger(__name__)


def _deliver(observer: CartObserver, outcome: OperationOutcome) -> None:
    if not outcome.ok:
        observer.on_error(outcome.operation, outcome.error, outcome.elapsed)
        return

    operation = outcome.operation
    if operation is CartOperation.ADD_ITEM:
        observer.on_item_added(outcome.product_id, outcome.quantity, outcome.elapsed)
    elif operation is CartOperation.REMOVE_ITEM:
        observer.on_item_removed(outcome.product_id, outcome.elapsed)
    elif operation is CartOperation.TOTAL:
        observer.on_total_calculated(outcome.total, outcome.item_count, outcome.elapsed)
    elif operation is CartOperation.ITEMS:
        observer.on_items_retrieved(outcome.item_count, outcome.elapsed)
    elif operation is CartOperation.CLEAR:
        observer.on_cart_cleared(outcome.elapsed)


class Cart:
    """Mapping of normalized product id to quantity for one shopping session.

    Each public operation is timed and reported to every subscribed observer
    after it finishes, successful or not. Errors from the operation itself
    reach the caller unchanged; errors from observers never do.

    Only the observer list is locked. Item reads and writes are not, so a
    cart shared between threads needs the caller's own lock.
    """

    def __init__(self, catalog: PriceCatalog, store: CartStore, cart_id: str | None = None):
        if catalog is None:
            raise InvalidArgumentException("Price catalog is required", "catalog")
        if store is None:
            raise InvalidArgumentException("Cart store is required", "store")
        self._catalog = catalog
        self._store = store
        self._cart_id = cart_id or getattr(store, "cart_id", None) or DEFAULT_CART_ID
        self._observers: list[CartObserver] = []
        self._observers_lock = threading.Lock()

    @classmethod
    def in_memory(cls, catalog: PriceCatalog, cart_id: str | None = None) -> Cart:
        return cls(catalog, InMemoryCartStore(), cart_id)

    def __repr__(self) -> str:
        return f"Cart(cart_id={self._cart_id!r}, store={type(self._store).__name__})"

    @property
    def cart_id(self) -> str:
        return self._cart_id

    @property
    def store(self) -> CartStore:
        return self._store

    @property
    def catalog(self) -> PriceCatalog:
        return self._catalog

    # ========== OBSERVERS ==========

    @property
    def observers(self) -> tuple[CartObserver, ...]:
        with self._observers_lock:
            return tuple(self._observers)

    def subscribe(self, observer: CartObserver) -> None:
        if observer is None:
            raise InvalidArgumentException("Observer cannot be None", "observer")
        with self._observers_lock:
            if not any(existing is observer for existing in self._observers):
                self._observers.append(observer)

    def unsubscribe(self, observer: CartObserver) -> None:
        if observer is None:
            return
        with self._observers_lock:
            self._observers = [existing for existing in self._observers if existing is not observer]

    def _notify(self, outcome: OperationOutcome) -> None:
        # Dispatch outside the lock so callbacks may (un)subscribe
        for observer in self.observers:
            try:
                _deliver(observer, outcome)
            except Exception as exc:
                logger.warning("%s", ObserverException(observer, outcome.operation.value, exc))

    def _execute(
        self,
        operation: CartOperation,
        action: Callable[[], tuple[Any, dict[str, Any]]],
    ) -> Any:
        started = time.perf_counter()
        try:
            result, details = action()
        except Exception as exc:
            self._notify(OperationOutcome(operation, time.perf_counter() - started, error=exc))
            raise
        self._notify(OperationOutcome(operation, time.perf_counter() - started, **details))
        return result

    # ========== OPERATIONS ==========

    def add_item(self, product_id: str, quantity: int) -> int:
        """Add ``quantity`` units and return the accumulated quantity."""
        return self._execute(CartOperation.ADD_ITEM, lambda: self._add_item(product_id, quantity))

    def remove_item(self, product_id: str) -> bool:
        """Drop a product entirely. Returns False if it was not in the cart."""
        return self._execute(CartOperation.REMOVE_ITEM, lambda: self._remove_item(product_id))

    def total(self) -> Decimal:
        """Exact sum of price * quantity; zero for an empty cart."""
        return self._execute(CartOperation.TOTAL, self._total)

    def items(self) -> CartItemMap:
        """Independent copy of the current mapping."""
        return self._execute(CartOperation.ITEMS, self._items)

    def clear(self) -> None:
        self._execute(CartOperation.CLEAR, self._clear)

    def _add_item(self, product_id: str, quantity: int) -> tuple[int, dict[str, Any]]:
        normalized = require_product_id(product_id)
        quantity = require_quantity(quantity)
        if not self._catalog.exists(normalized):
            raise InvalidArgumentException(f"Product '{product_id}' not found", "product_id")

        items = self._store.load()
        new_quantity = items.get(normalized, 0) + quantity
        items[normalized] = new_quantity
        self._store.save(items)
        return new_quantity, {"product_id": normalized, "quantity": quantity}

    def _remove_item(self, product_id: str) -> tuple[bool, dict[str, Any]]:
        normalized = require_product_id(product_id)
        items = self._store.load()
        present = items.pop(normalized, None) is not None
        if present:
            self._store.save(items)
        return present, {"product_id": normalized}

    def _total(self) -> tuple[Decimal, dict[str, Any]]:
        items = self._store.load()
        total = sum_money(
            line_total(self._catalog.get_price(product_id), quantity)
            for product_id, quantity in items.items()
        )
        return total, {"total": total, "item_count": len(items)}

    def _items(self) -> tuple[CartItemMap, dict[str, Any]]:
        items = dict(self._store.load())
        return items, {"item_count": len(items)}

    def _clear(self) -> tuple[None, dict[str, Any]]:
        self._store.clear()
        return None, {}
