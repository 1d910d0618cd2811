"""ARQ worker configuration.

Run the worker with:
    arq storefront.core.jobs.worker.WorkerSettings
"""

from typing import Any, ClassVar

import structlog
from arq import cron
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import storefront.models  # noqa: F401  register every table with the metadata
from storefront.config import settings
from storefront.core.jobs.registry import get_redis_settings
from storefront.core.jobs.tasks import purge_expired_shops
from storefront.core.logging import configure_logging


async def startup(ctx: dict[str, Any]) -> None:
    """Create the database engine and session factory shared by all jobs."""
    configure_logging()
    log = structlog.get_logger()
    log.info("worker_startup", environment=settings.environment)

    engine = create_async_engine(
        settings.async_database_url,
        pool_size=5,
        max_overflow=10,
        echo=settings.database_echo,
    )

    ctx["db_engine"] = engine
    ctx["db_session_factory"] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    log.info("worker_startup_complete")


async def shutdown(ctx: dict[str, Any]) -> None:
    log = structlog.get_logger()
    log.info("worker_shutdown")

    engine = ctx.get("db_engine")
    if engine:
        await engine.dispose()
        log.info("database_engine_disposed")

    log.info("worker_shutdown_complete")


class WorkerSettings:
    """ARQ worker settings."""

    functions: ClassVar[list[Any]] = [
        purge_expired_shops,
    ]

    cron_jobs: ClassVar[list[Any]] = [
        # Purge expired shops daily at 2 AM
        cron(purge_expired_shops, hour=2, minute=0, unique=True),
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = get_redis_settings()

    max_jobs = 10
    job_timeout = 300
    keep_result = 3600
    retry_jobs = False
