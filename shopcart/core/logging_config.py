"""
Centralized logging configuration for shopcart.

Usage:
    from shopcart.core.logging_config import logger, setup_logging

    setup_logging("DEBUG")
    logger.info("Cart created")
"""
from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("shopcart")


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_name, logging.INFO)


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Configure the root logger once and return the package logger.

    Args:
        level: Level name or number; falls back to ``LOG_LEVEL`` then INFO.

    Returns:
        The ``shopcart`` logger
    """
    resolved = _resolve_level(level)
    root = logging.getLogger()

    # Only attach a handler if the host application has not configured one
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(resolved)

    logger.setLevel(resolved)

    # redis-py is chatty at DEBUG
    logging.getLogger("redis").setLevel(logging.WARNING)
    return logger


__all__ = ["LOG_FORMAT", "logger", "setup_logging"]
