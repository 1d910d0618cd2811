"""Shared helpers."""

from storefront.core.utils.text import generate_slug
from storefront.core.utils.time import as_utc, utcnow


__all__ = [
    "as_utc",
    "generate_slug",
    "utcnow",
]
