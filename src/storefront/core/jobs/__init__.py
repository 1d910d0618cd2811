"""Background job processing with ARQ.

The worker runs the daily purge of expired shops; the API can also
enqueue it on demand.
"""

from storefront.core.jobs.registry import enqueue, get_arq_pool, init_arq_pool


__all__ = [
    "enqueue",
    "get_arq_pool",
    "init_arq_pool",
]
