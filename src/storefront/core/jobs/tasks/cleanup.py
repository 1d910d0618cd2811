"""Daily purge of shops past their recovery window."""

from typing import Any

import structlog

from storefront.modules.tenants.cleanup import run_cleanup_job


log = structlog.get_logger()


async def purge_expired_shops(ctx: dict[str, Any]) -> str:
    """Permanently delete shops soft-deleted longer than the retention window.

    Args:
        ctx: Worker context containing the database session factory

    Returns:
        One-line summary of the run. Failures are reported in the
        summary rather than raised, so arq does not retry a purge that
        already rolled back.
    """
    summary = await run_cleanup_job(ctx["db_session_factory"])
    log.info("purge_expired_shops_complete", summary=summary)
    return summary
