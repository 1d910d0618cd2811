"""Text processing utilities."""

import re

from storefront.core.constants import MAX_SLUG_LENGTH


def generate_slug(name: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Generate a URL-safe slug from a shop or category name.

    Lowercases, drops punctuation, collapses whitespace, underscores and
    hyphen runs into single hyphens, trims hyphens from both ends and
    truncates to max_length.

    Examples:
        >>> generate_slug("Phones & Tablets")
        'phones-tablets'
        >>> generate_slug("  Abebe's   Shop!  ")
        'abebes-shop'
    """
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s_]+", "-", slug)
    return slug[:max_length].strip("-")
