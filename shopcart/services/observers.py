"""Cart observers: logging, performance statistics and metrics export."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal

from shopcart.core.constants import DEFAULT_SLOW_OPERATION_MS
from shopcart.core.metrics import MetricsRegistry, metrics as default_metrics
from shopcart.core.money import format_money
from shopcart.domain.value_objects import CartOperation


class CartObserver:
    """Receives a callback after every cart operation.

    All callbacks are no-ops here; subclasses override the ones they need.
    ``elapsed`` is wall time in seconds. Exceptions raised from a callback
    are logged by the cart and otherwise ignored.
    """

    def on_item_added(self, product_id: str, quantity: int, elapsed: float) -> None:
        pass

    def on_item_removed(self, product_id: str, elapsed: float) -> None:
        pass

    def on_total_calculated(self, total: Decimal, item_count: int, elapsed: float) -> None:
        pass

    def on_items_retrieved(self, item_count: int, elapsed: float) -> None:
        pass

    def on_cart_cleared(self, elapsed: float) -> None:
        pass

    def on_error(self, operation: CartOperation, error: BaseException, elapsed: float) -> None:
        pass


class LoggingCartObserver(CartObserver):
    """Writes one line per event: INFO for successes, ERROR for failures."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger("shopcart.cart")

    def on_item_added(self, product_id: str, quantity: int, elapsed: float) -> None:
        self._logger.info(
            "Cart operation: Added %d of %s in %.2fms", quantity, product_id, elapsed * 1000
        )

    def on_item_removed(self, product_id: str, elapsed: float) -> None:
        self._logger.info("Cart operation: Removed %s in %.2fms", product_id, elapsed * 1000)

    def on_total_calculated(self, total: Decimal, item_count: int, elapsed: float) -> None:
        self._logger.info(
            "Cart operation: Calculated total %s for %d items in %.2fms",
            format_money(total),
            item_count,
            elapsed * 1000,
        )

    def on_items_retrieved(self, item_count: int, elapsed: float) -> None:
        self._logger.info("Cart operation: Retrieved %d items in %.2fms", item_count, elapsed * 1000)

    def on_cart_cleared(self, elapsed: float) -> None:
        self._logger.info("Cart operation: Cleared cart in %.2fms", elapsed * 1000)

    def on_error(self, operation: CartOperation, error: BaseException, elapsed: float) -> None:
        self._logger.error(
            "Cart operation failed: %s failed after %.2fms - %s",
            operation.value,
            elapsed * 1000,
            error,
            exc_info=(type(error), error, error.__traceback__),
        )


@dataclass(frozen=True, slots=True)
class OperationStats:
    """Snapshot of one operation's timings in milliseconds."""

    operation: str
    total_calls: int
    average_ms: float
    min_ms: float
    max_ms: float
    slow_calls: int

    def __str__(self) -> str:
        return (
            f"{self.operation}: {self.total_calls} calls, "
            f"avg {self.average_ms:.2f}ms, {self.slow_calls} slow"
        )


class _RunningAggregate:
    __slots__ = ("count", "total_ms", "min_ms", "max_ms", "slow")

    def __init__(self) -> None:
        self.count = 0
        self.total_ms = 0.0
        self.min_ms = float("inf")
        self.max_ms = 0.0
        self.slow = 0

    def add(self, elapsed_ms: float, slow: bool) -> None:
        self.count += 1
        self.total_ms += elapsed_ms
        self.min_ms = min(self.min_ms, elapsed_ms)
        self.max_ms = max(self.max_ms, elapsed_ms)
        if slow:
            self.slow += 1


class PerformanceCartObserver(CartObserver):
    """Keeps per-operation duration statistics and flags slow calls.

    Failed operations are tracked under ``<operation>_error``.
    """

    def __init__(
        self,
        slow_threshold_ms: float = DEFAULT_SLOW_OPERATION_MS,
        logger: logging.Logger | None = None,
    ):
        if slow_threshold_ms < 0:
            raise ValueError("slow_threshold_ms must not be negative")
        self.slow_threshold_ms = slow_threshold_ms
        self._logger = logger or logging.getLogger("shopcart.performance")
        self._aggregates: dict[str, _RunningAggregate] = {}
        self._lock = threading.Lock()

    def _record(self, name: str, elapsed: float, context: str | None = None) -> None:
        elapsed_ms = elapsed * 1000
        slow = elapsed_ms > self.slow_threshold_ms
        with self._lock:
            aggregate = self._aggregates.get(name)
            if aggregate is None:
                aggregate = self._aggregates[name] = _RunningAggregate()
            aggregate.add(elapsed_ms, slow)
        if slow and context is not None:
            self._logger.warning(
                "Slow cart operation: %s (%s) took %.2fms (threshold: %.1fms)",
                name,
                context,
                elapsed_ms,
                self.slow_threshold_ms,
            )

    def on_item_added(self, product_id: str, quantity: int, elapsed: float) -> None:
        self._record(CartOperation.ADD_ITEM.value, elapsed, product_id)

    def on_item_removed(self, product_id: str, elapsed: float) -> None:
        self._record(CartOperation.REMOVE_ITEM.value, elapsed, product_id)

    def on_total_calculated(self, total: Decimal, item_count: int, elapsed: float) -> None:
        self._record(CartOperation.TOTAL.value, elapsed, f"items:{item_count}")

    def on_items_retrieved(self, item_count: int, elapsed: float) -> None:
        self._record(CartOperation.ITEMS.value, elapsed, f"count:{item_count}")

    def on_cart_cleared(self, elapsed: float) -> None:
        self._record(CartOperation.CLEAR.value, elapsed, "clear")

    def on_error(self, operation: CartOperation, error: BaseException, elapsed: float) -> None:
        self._record(f"{operation.value}_error", elapsed)
        self._logger.warning(
            "Cart operation %s failed after %.2fms: %s", operation.value, elapsed * 1000, error
        )

    def get_stats(self) -> dict[str, OperationStats]:
        with self._lock:
            return {
                name: OperationStats(
                    operation=name,
                    total_calls=agg.count,
                    average_ms=agg.total_ms / agg.count,
                    min_ms=agg.min_ms,
                    max_ms=agg.max_ms,
                    slow_calls=agg.slow,
                )
                for name, agg in self._aggregates.items()
                if agg.count
            }

    def reset(self) -> None:
        with self._lock:
            self._aggregates.clear()

    def format_report(self) -> str:
        return "\n".join(str(stats) for _, stats in sorted(self.get_stats().items()))


class MetricsCartObserver(CartObserver):
    """Feeds cart events into a MetricsRegistry."""

    def __init__(self, registry: MetricsRegistry | None = None):
        self.registry = registry or default_metrics

    def _success(self, operation: CartOperation, elapsed: float) -> None:
        self.registry.operations_total.inc(operation=operation.value, status="success")
        self.registry.operation_duration.observe(elapsed, operation=operation.value)

    def on_item_added(self, product_id: str, quantity: int, elapsed: float) -> None:
        self._success(CartOperation.ADD_ITEM, elapsed)

    def on_item_removed(self, product_id: str, elapsed: float) -> None:
        self._success(CartOperation.REMOVE_ITEM, elapsed)

    def on_total_calculated(self, total: Decimal, item_count: int, elapsed: float) -> None:
        self._success(CartOperation.TOTAL, elapsed)

    def on_items_retrieved(self, item_count: int, elapsed: float) -> None:
        self._success(CartOperation.ITEMS, elapsed)

    def on_cart_cleared(self, elapsed: float) -> None:
        self._success(CartOperation.CLEAR, elapsed)

    def on_error(self, operation: CartOperation, error: BaseException, elapsed: float) -> None:
        self.registry.operations_total.inc(operation=operation.value, status="error")
        self.registry.operation_duration.observe(elapsed, operation=operation.value)
        self.registry.errors_total.inc(operation=operation.value, error_type=type(error).__name__)
