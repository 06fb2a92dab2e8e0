"""Bootstrap: wire Redis, the catalog and the cart factory from settings."""
from __future__ import annotations

from shopcart.core.config import Settings, load_settings
from shopcart.core.exceptions import ConfigurationException
from shopcart.core.logging_config import logger, setup_logging
from shopcart.core.metrics import MetricsRegistry
from shopcart.core.redis_client import create_redis_client
from shopcart.domain.value_objects import CartBackend
from shopcart.integrations.catalog import StaticPriceCatalog
from shopcart.services.cart_factory import CartFactory


def build_cart_factory(
    settings: Settings | None = None,
    *,
    client=None,
    metrics_registry: MetricsRegistry | None = None,
) -> CartFactory:
    """Create a CartFactory from configuration.

    Priority 1: an explicitly passed Redis client.
    Priority 2: ``settings.redis_url`` (PING-verified; unreachable means memory only).
    Priority 3: memory carts over the static default catalog.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    if settings.backend is CartBackend.MEMORY:
        client = None
        logger.info("Cart backend forced to memory")
    elif client is None:
        client = create_redis_client(settings.redis_url)

    if settings.backend is CartBackend.REDIS and client is None:
        raise ConfigurationException("CART_BACKEND=redis but Redis is not reachable")

    factory = CartFactory(
        StaticPriceCatalog.default(),
        client,
        backend=settings.backend,
        cart_ttl_seconds=settings.cart_ttl_seconds,
        catalog_prefix=settings.catalog_prefix,
        slow_operation_ms=settings.slow_operation_ms,
        metrics_registry=metrics_registry,
    )

    if client is not None and settings.seed_catalog:
        catalog = factory.redis_catalog()
        if not catalog.get_all():
            catalog.initialize_defaults()
        logger.info("Using Redis for carts (catalog prefix '%s')", settings.catalog_prefix)
    elif client is None:
        logger.info("Using in-memory carts with the default catalog")

    return factory
