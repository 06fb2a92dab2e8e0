"""Cart services: the cart state machine, observers and factory."""

from .cart import Cart
from .cart_factory import CartFactory
from .observers import (
    CartObserver,
    LoggingCartObserver,
    MetricsCartObserver,
    OperationStats,
    PerformanceCartObserver,
)

__all__ = [
    "Cart",
    "CartFactory",
    "CartObserver",
    "LoggingCartObserver",
    "MetricsCartObserver",
    "OperationStats",
    "PerformanceCartObserver",
]
