"""Background job tasks registered with the worker."""

from storefront.core.jobs.tasks.cleanup import purge_expired_shops


__all__ = [
    "purge_expired_shops",
]
