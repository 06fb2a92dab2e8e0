"""Environment-driven configuration for carts and their backends."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from shopcart.core.constants import DEFAULT_CATALOG_PREFIX, DEFAULT_SLOW_OPERATION_MS
from shopcart.core.exceptions import ConfigurationException
from shopcart.domain.value_objects import CartBackend


def _str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"true", "1", "yes", "y"}


def _optional_positive_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationException(f"{name} must be positive, got {value}")
    return value


def _non_negative_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationException(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str | None = None
    backend: CartBackend | None = None  # None: probe Redis and pick
    cart_ttl_seconds: int | None = None
    slow_operation_ms: float = DEFAULT_SLOW_OPERATION_MS
    catalog_prefix: str = DEFAULT_CATALOG_PREFIX
    seed_catalog: bool = True
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    backend_raw = os.getenv("CART_BACKEND", "").strip().lower()
    backend: CartBackend | None = None
    if backend_raw and backend_raw != "auto":
        try:
            backend = CartBackend(backend_raw)
        except ValueError as exc:
            raise ConfigurationException(
                f"CART_BACKEND must be one of memory, redis, auto; got {backend_raw!r}"
            ) from exc

    catalog_prefix = os.getenv("CATALOG_KEY_PREFIX", "").strip() or DEFAULT_CATALOG_PREFIX

    return Settings(
        redis_url=os.getenv("REDIS_URL") or None,
        backend=backend,
        cart_ttl_seconds=_optional_positive_int("CART_TTL_SECONDS"),
        slow_operation_ms=_non_negative_float("CART_SLOW_OPERATION_MS", DEFAULT_SLOW_OPERATION_MS),
        catalog_prefix=catalog_prefix,
        seed_catalog=_str_to_bool(os.getenv("CATALOG_SEED_DEFAULTS"), default=True),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
