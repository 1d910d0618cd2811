"""Logging module with structured logging and request tracking."""

from storefront.core.logging.config import configure_logging
from storefront.core.logging.middleware import (
    RequestIdMiddleware,
    RequestLoggingMiddleware,
)


__all__ = [
    "RequestIdMiddleware",
    "RequestLoggingMiddleware",
    "configure_logging",
]
