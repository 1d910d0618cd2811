"""Telegram storefront backend: shops, categories and the universal marketplace."""

__version__ = "0.1.0"
