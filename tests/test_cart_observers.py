"""Tests for observer dispatch and the standard observers."""
from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from shopcart.core.exceptions import InvalidArgumentException, ProductNotFoundException
from shopcart.core.metrics import MetricsRegistry
from shopcart.domain.value_objects import CartOperation
from shopcart.integrations.cart_store import InMemoryCartStore, RedisCartStore
from shopcart.services.cart import Cart
from shopcart.services.observers import (
    LoggingCartObserver,
    MetricsCartObserver,
    OperationStats,
    PerformanceCartObserver,
)


@pytest.fixture
def cart(catalog) -> Cart:
    return Cart(catalog, InMemoryCartStore())


class TestSubscription:
    def test_events_delivered_in_order(self, cart, recorder):
        """Observers see each operation in call order."""
        cart.subscribe(recorder)
        cart.add_item("Apple", 2)
        cart.items()
        cart.total()
        cart.remove_item("apple")
        cart.clear()

        assert recorder.events == [
            ("added", "apple", 2),
            ("items", 1),
            ("total", Decimal("1.00"), 1),
            ("removed", "apple"),
            ("cleared",),
        ]

    def test_subscribe_none_rejected(self, cart):
        """None cannot be subscribed."""
        with pytest.raises(InvalidArgumentException):
            cart.subscribe(None)

    def test_double_subscribe_notifies_once(self, cart, recorder):
        """Subscribing twice still notifies once."""
        cart.subscribe(recorder)
        cart.subscribe(recorder)
        cart.add_item("apple", 1)
        assert len(cart.observers) == 1
        assert recorder.events == [("added", "apple", 1)]

    def test_unsubscribe_stops_notifications(self, cart, recorder):
        """Unsubscribed observers hear nothing more."""
        cart.subscribe(recorder)
        cart.add_item("apple", 1)
        cart.unsubscribe(recorder)
        cart.add_item("apple", 1)
        cart.total()
        assert recorder.events == [("added", "apple", 1)]

    def test_unsubscribe_unknown_or_none_is_noop(self, cart, recorder):
        """Unsubscribing a stranger or None is harmless."""
        cart.unsubscribe(recorder)
        cart.unsubscribe(None)
        assert cart.observers == ()

    def test_observer_may_unsubscribe_itself(self, cart, recorder):
        """A callback can unsubscribe its own observer."""
        class OneShot(type(recorder)):
            def __init__(self, owner):
                super().__init__()
                self.owner = owner

            def on_item_added(self, product_id, quantity, elapsed):
                super().on_item_added(product_id, quantity, elapsed)
                self.owner.unsubscribe(self)

        one_shot = OneShot(cart)
        cart.subscribe(one_shot)
        cart.add_item("apple", 1)
        cart.add_item("apple", 1)
        assert one_shot.events == [("added", "apple", 1)]


class TestFailingObservers:
    def test_exploding_observer_does_not_break_operations(self, cart, exploding, recorder):
        """A failing observer neither stops the cart nor later observers."""
        cart.subscribe(exploding)
        cart.subscribe(recorder)

        assert cart.add_item("apple", 2) == 2
        assert cart.remove_item("banana") is False
        assert cart.total() == Decimal("1.00")
        assert cart.items() == {"apple": 2}

        assert exploding.calls == 4
        # dispatch continued past the failing observer
        assert [event[0] for event in recorder.events] == ["added", "removed", "total", "items"]

    def test_exploding_observer_logged(self, cart, exploding, caplog):
        """Observer failures are logged as warnings."""
        cart.subscribe(exploding)
        with caplog.at_level(logging.WARNING, logger="shopcart.services.cart"):
            cart.add_item("apple", 1)
        assert "ExplodingObserver failed during add_item" in caplog.text

    def test_original_error_survives_exploding_observer(self, cart, exploding):
        """The caller still gets the operation's own error."""
        cart.subscribe(exploding)
        with pytest.raises(InvalidArgumentException):
            cart.add_item("caviar", 1)
        assert exploding.calls == 1


class TestErrorNotifications:
    def test_validation_error_reported_then_raised(self, cart, recorder):
        """Errors reach observers before the caller."""
        cart.subscribe(recorder)
        with pytest.raises(InvalidArgumentException) as exc_info:
            cart.add_item("apple", 0)

        assert len(recorder.events) == 1
        kind, operation, error, elapsed = recorder.events[0]
        assert kind == "error"
        assert operation is CartOperation.ADD_ITEM
        assert error is exc_info.value
        assert elapsed >= 0

    def test_remove_error_reported(self, cart, recorder):
        """Failed removals are reported."""
        cart.subscribe(recorder)
        with pytest.raises(InvalidArgumentException):
            cart.remove_item("  ")
        assert recorder.events[0][1] is CartOperation.REMOVE_ITEM

    def test_total_error_reported(self, redis_catalog, fake_redis, recorder):
        """Failed totals are reported."""
        cart = Cart(redis_catalog, RedisCartStore(fake_redis, "pricing"))
        cart.subscribe(recorder)
        cart.add_item("cheese", 1)
        redis_catalog.remove("cheese")

        with pytest.raises(ProductNotFoundException):
            cart.total()
        assert recorder.events[-1][0] == "error"
        assert recorder.events[-1][1] is CartOperation.TOTAL


class TestLoggingObserver:
    def test_success_lines_at_info(self, cart, caplog):
        """Successes are logged at INFO."""
        log = logging.getLogger("tests.cart.logging")
        cart.subscribe(LoggingCartObserver(log))
        with caplog.at_level(logging.INFO, logger="tests.cart.logging"):
            cart.add_item("bread", 2)
            cart.total()
            cart.items()
            cart.remove_item("bread")

        messages = [record.getMessage() for record in caplog.records]
        assert messages[0].startswith("Cart operation: Added 2 of bread in ")
        assert messages[1].startswith("Cart operation: Calculated total $5.00 for 1 items")
        assert messages[2].startswith("Cart operation: Retrieved 1 items")
        assert messages[3].startswith("Cart operation: Removed bread")
        assert all(record.levelno == logging.INFO for record in caplog.records)

    def test_failure_line_at_error_with_exception(self, cart, caplog):
        """Failures are logged at ERROR with the exception."""
        log = logging.getLogger("tests.cart.logging.errors")
        cart.subscribe(LoggingCartObserver(log))
        with caplog.at_level(logging.INFO, logger="tests.cart.logging.errors"):
            with pytest.raises(InvalidArgumentException):
                cart.add_item("caviar", 1)

        (record,) = caplog.records
        assert record.levelno == logging.ERROR
        assert "add_item failed after" in record.getMessage()
        assert "caviar" in record.getMessage()
        assert record.exc_info[0] is InvalidArgumentException


class TestPerformanceObserver:
    def test_stats_per_operation(self):
        """Stats hold count, min, max, average and slow calls."""
        observer = PerformanceCartObserver(slow_threshold_ms=100.0)
        observer.on_item_added("apple", 1, 0.010)
        observer.on_item_added("apple", 1, 0.030)
        observer.on_item_added("apple", 1, 0.200)
        observer.on_total_calculated(Decimal("1"), 1, 0.001)

        stats = observer.get_stats()
        added = stats["add_item"]
        assert added.total_calls == 3
        assert added.min_ms == pytest.approx(10.0)
        assert added.max_ms == pytest.approx(200.0)
        assert added.average_ms == pytest.approx(80.0)
        assert added.slow_calls == 1
        assert stats["total"].total_calls == 1
        assert stats["total"].slow_calls == 0

    def test_errors_tracked_separately(self):
        """Failures are tracked under <operation>_error."""
        observer = PerformanceCartObserver()
        observer.on_error(CartOperation.TOTAL, RuntimeError("down"), 0.002)
        assert set(observer.get_stats()) == {"total_error"}

    def test_default_threshold(self):
        """The slow threshold defaults to 100ms."""
        assert PerformanceCartObserver().slow_threshold_ms == 100.0

    def test_negative_threshold_rejected(self):
        """A negative threshold is invalid."""
        with pytest.raises(ValueError):
            PerformanceCartObserver(slow_threshold_ms=-1)

    def test_reset_clears_everything(self):
        """reset() wipes all statistics."""
        observer = PerformanceCartObserver()
        observer.on_items_retrieved(3, 0.001)
        observer.on_item_removed("apple", 0.001)
        observer.reset()
        assert observer.get_stats() == {}

    def test_stats_are_snapshots(self):
        """get_stats() returns a frozen copy."""
        observer = PerformanceCartObserver()
        observer.on_items_retrieved(1, 0.001)
        before = observer.get_stats()
        observer.on_items_retrieved(1, 0.001)
        assert before["items"].total_calls == 1

    def test_slow_operation_logged(self, caplog):
        """Slow calls are logged as warnings."""
        observer = PerformanceCartObserver(slow_threshold_ms=5.0)
        with caplog.at_level(logging.WARNING, logger="shopcart.performance"):
            observer.on_item_added("apple", 1, 0.050)
        assert "Slow cart operation: add_item (apple)" in caplog.text

    def test_wired_to_cart(self, cart):
        """The observer counts real cart calls."""
        observer = PerformanceCartObserver()
        cart.subscribe(observer)
        cart.add_item("apple", 1)
        cart.add_item("apple", 1)
        cart.items()
        stats = observer.get_stats()
        assert stats["add_item"].total_calls == 2
        assert stats["items"].total_calls == 1

    def test_report_format(self):
        """Report lines summarize each operation."""
        observer = PerformanceCartObserver()
        observer.on_item_added("apple", 1, 0.0005)
        assert observer.format_report() == "add_item: 1 calls, avg 0.50ms, 0 slow"
        assert str(OperationStats("x", 2, 1.0, 0.5, 1.5, 0)) == "x: 2 calls, avg 1.00ms, 0 slow"


class TestMetricsObserver:
    def test_counts_successes_and_errors(self, cart):
        """Outcomes and error types are counted."""
        registry = MetricsRegistry()
        cart.subscribe(MetricsCartObserver(registry))
        cart.add_item("apple", 1)
        cart.total()
        with pytest.raises(InvalidArgumentException):
            cart.add_item("caviar", 1)

        assert registry.operations_total.get(operation="add_item", status="success") == 1
        assert registry.operations_total.get(operation="add_item", status="error") == 1
        assert registry.operations_total.get(operation="total", status="success") == 1
        assert registry.errors_total.get(
            operation="add_item", error_type="InvalidArgumentException"
        ) == 1
        assert registry.operation_duration.count(operation="add_item") == 2
