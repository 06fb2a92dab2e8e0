"""Cart-wide constants and defaults.

Centralizes key prefixes, thresholds and the seed catalog so the stores,
the factory and the settings loader agree on them.
"""
from decimal import Decimal

# ============== REDIS KEYS ==============
CART_KEY_PREFIX = "cart"  # cart:{cart_id}
DEFAULT_CATALOG_PREFIX = "product"  # product:{product_id}
DEFAULT_CART_ID = "default"
USER_CART_ID_TEMPLATE = "user_{user_id}"

# ============== REDIS CLIENT ==============
REDIS_SOCKET_TIMEOUT = 5
REDIS_CONNECT_TIMEOUT = 5

# ============== OBSERVERS ==============
DEFAULT_SLOW_OPERATION_MS = 100.0

# ============== CATALOG ==============
# id -> (price, name, description)
DEFAULT_CATALOG: dict[str, tuple[Decimal, str, str]] = {
    "apple": (Decimal("0.50"), "Apple", "Fresh red apple"),
    "banana": (Decimal("0.30"), "Banana", "Ripe yellow banana"),
    "orange": (Decimal("0.75"), "Orange", "Juicy orange"),
    "bread": (Decimal("2.50"), "Bread", "Whole wheat bread loaf"),
    "milk": (Decimal("3.25"), "Milk", "Fresh whole milk (1 gallon)"),
    "cheese": (Decimal("4.99"), "Cheese", "Sharp cheddar cheese block"),
    "chicken": (Decimal("8.99"), "Chicken", "Free-range chicken breast (1 lb)"),
    "rice": (Decimal("1.99"), "Rice", "Long grain white rice (2 lb bag)"),
}
