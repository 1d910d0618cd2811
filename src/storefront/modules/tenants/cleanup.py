"""Entry points for purging shops past their recovery window.

``cleanup_expired_shops`` works on a caller's session and lets errors
propagate. ``run_cleanup_job`` is for cron-style callers that only log
text: it owns its session and reports failure as a string.
"""

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.config import get_settings
from storefront.modules.tenants.repos import TenantRepository
from storefront.modules.tenants.services import PurgeResult, TenantService


log = structlog.get_logger()


async def cleanup_expired_shops(
    session: AsyncSession,
    now: datetime | None = None,
    retention_days: int | None = None,
) -> PurgeResult:
    """Purge every shop soft-deleted longer than the retention window ago."""
    service = TenantService(TenantRepository(session))
    return await service.purge_expired_tenants(
        retention_days=retention_days or get_settings().shop_retention_days,
        now=now,
    )


def format_cleanup_summary(result: PurgeResult) -> str:
    if result.deleted_count == 0:
        return "Cleanup completed: No expired shops found"
    return f"Cleanup completed: {result.deleted_count} shop(s) permanently deleted"


async def run_cleanup_job(
    session_factory: async_sessionmaker[AsyncSession],
    now: datetime | None = None,
) -> str:
    """Run one cleanup pass and describe the outcome in one line. Never raises."""
    log.info("cleanup_job_started")
    try:
        async with session_factory() as session:
            result = await cleanup_expired_shops(session, now=now)
            await session.commit()
    except Exception as e:
        log.exception("cleanup_job_failed", error=str(e))
        return f"Cleanup failed: {e}"

    summary = format_cleanup_summary(result)
    log.info("cleanup_job_finished", deleted_count=result.deleted_count, summary=summary)
    return summary
