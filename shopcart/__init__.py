"""In-process shopping carts on memory or Redis storage, with observers."""

from shopcart.core.exceptions import (
    ConfigurationException,
    InvalidArgumentException,
    ProductNotFoundException,
    ShopCartException,
    StorageException,
)
from shopcart.domain import CartBackend, CartOperation, OperationOutcome, ProductRecord
from shopcart.integrations import (
    CartStore,
    InMemoryCartStore,
    PriceCatalog,
    RedisCartStore,
    RedisPriceCatalog,
    StaticPriceCatalog,
)
from shopcart.services import (
    Cart,
    CartFactory,
    CartObserver,
    LoggingCartObserver,
    MetricsCartObserver,
    OperationStats,
    PerformanceCartObserver,
)

__version__ = "1.0.0"

__all__ = [
    "Cart",
    "CartBackend",
    "CartFactory",
    "CartObserver",
    "CartOperation",
    "CartStore",
    "ConfigurationException",
    "InMemoryCartStore",
    "InvalidArgumentException",
    "LoggingCartObserver",
    "MetricsCartObserver",
    "OperationOutcome",
    "OperationStats",
    "PerformanceCartObserver",
    "PriceCatalog",
    "ProductNotFoundException",
    "ProductRecord",
    "RedisCartStore",
    "RedisPriceCatalog",
    "ShopCartException",
    "StaticPriceCatalog",
    "StorageException",
]
