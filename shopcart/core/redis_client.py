"""Redis client construction shared by cart stores and the catalog."""
from __future__ import annotations

import logging
from typing import Any

import redis

from shopcart.core.constants import REDIS_CONNECT_TIMEOUT, REDIS_SOCKET_TIMEOUT

logger = logging.getLogger(__name__)


def create_redis_client(redis_url: str | None) -> Any | None:
    """Connect to Redis and verify it with PING.

    Args:
        redis_url: Connection URL, e.g. ``redis://localhost:6379/0``

    Returns:
        A connected client, or None when no URL is configured or the server
        does not answer
    """
    if not redis_url:
        logger.warning("REDIS_URL is not set; carts use in-memory storage")
        return None

    try:
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=REDIS_CONNECT_TIMEOUT,
            socket_timeout=REDIS_SOCKET_TIMEOUT,
        )
        client.ping()
    except redis.RedisError as exc:
        logger.warning("Redis init failed, carts use in-memory storage: %s", exc)
        return None

    logger.info("Redis cart storage enabled")
    return client


def ping(client: Any | None) -> bool:
    """Check if Redis is available.

    Returns:
        True if Redis responds to PING
    """
    if client is None:
        return False
    try:
        return bool(client.ping())
    except redis.RedisError as exc:
        logger.debug("Redis connectivity test failed: %s", exc)
        return False
