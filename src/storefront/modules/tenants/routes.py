"""Shop lifecycle API routes."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.api.dependencies import AdminUser, CurrentUserId
from storefront.config import settings
from storefront.core.database import async_session_factory
from storefront.core.errors import UnauthorizedError
from storefront.core.jobs import enqueue
from storefront.core.utils import utcnow
from storefront.modules.tenants import router
from storefront.modules.tenants.cleanup import run_cleanup_job
from storefront.modules.tenants.schemas import (
    CleanupRunResponse,
    CleanupStatusResponse,
    DeletedShopListResponse,
    DeletedShopResponse,
    PurgeResponse,
    ShopCreate,
    ShopDeletedResponse,
    ShopListResponse,
    ShopResponse,
    ShopRestoredResponse,
)
from storefront.modules.tenants.services import TenantSvc


log = structlog.get_logger()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for endpoints that manage their own transaction."""
    return async_session_factory


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


# ============================================================
# Owner routes
# ============================================================


@router.get(
    "/shops",
    response_model=ShopListResponse,
    summary="List shops",
    description="List live shops. Soft-deleted shops are never included.",
)
async def list_shops(service: TenantSvc) -> ShopListResponse:
    shops = await service.list_live_shops()
    return ShopListResponse(items=[ShopResponse.model_validate(s) for s in shops])


@router.post(
    "/shops",
    response_model=ShopResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create shop",
    description="Create a shop. The caller becomes its owner.",
)
async def create_shop(
    data: ShopCreate,
    user_id: CurrentUserId,
    service: TenantSvc,
) -> ShopResponse:
    tenant = await service.create_shop(user_id, data)
    return ShopResponse.model_validate(tenant)


@router.get(
    "/shops/deleted",
    response_model=DeletedShopListResponse,
    summary="List my deleted shops",
    description="Shops the caller owns that are soft-deleted and can still be restored.",
)
async def list_my_deleted_shops(
    user_id: CurrentUserId,
    service: TenantSvc,
) -> DeletedShopListResponse:
    shops = await service.list_deleted_shops(user_id=user_id)
    return DeletedShopListResponse(
        shops=[DeletedShopResponse.model_validate(s) for s in shops]
    )


@router.delete(
    "/shops/{tenant_id}",
    response_model=ShopDeletedResponse,
    summary="Delete shop",
    description="Soft-delete a shop. The owner can restore it until it is purged.",
)
async def delete_shop(
    tenant_id: UUID,
    user_id: CurrentUserId,
    service: TenantSvc,
) -> ShopDeletedResponse:
    grace = await service.soft_delete_shop(tenant_id, user_id)
    return ShopDeletedResponse(grace_period_days=grace)


@router.post(
    "/shops/{tenant_id}/restore",
    response_model=ShopRestoredResponse,
    summary="Restore shop",
    description="Restore a soft-deleted shop. Returns 404 `tenant_purged` once it has been purged.",
)
async def restore_shop(
    tenant_id: UUID,
    user_id: CurrentUserId,
    service: TenantSvc,
) -> ShopRestoredResponse:
    tenant = await service.restore_shop(tenant_id, user_id)
    return ShopRestoredResponse(shop=ShopResponse.model_validate(tenant))


# ============================================================
# Admin routes
# ============================================================


@router.get(
    "/admin/deleted-shops",
    response_model=DeletedShopListResponse,
    summary="List all deleted shops",
    description="Every soft-deleted shop with days elapsed, days remaining and expiry.",
)
async def list_deleted_shops(
    admin: AdminUser,  # noqa: ARG001 - required for auth
    service: TenantSvc,
) -> DeletedShopListResponse:
    shops = await service.list_deleted_shops()
    return DeletedShopListResponse(
        shops=[DeletedShopResponse.model_validate(s) for s in shops]
    )


@router.post(
    "/admin/cleanup/expired",
    response_model=PurgeResponse,
    summary="Purge expired shops",
    description="Permanently delete every shop past its recovery window.",
)
async def purge_expired(admin: AdminUser, service: TenantSvc) -> PurgeResponse:
    result = await service.purge_expired_tenants()
    log.info("admin_purge_expired", admin_id=str(admin.id), deleted_count=result.deleted_count)
    return PurgeResponse(
        message=(
            "No expired shops found"
            if result.deleted_count == 0
            else f"Successfully deleted {result.deleted_count} expired shop(s)"
        ),
        deleted_count=result.deleted_count,
        shop_ids=result.shop_ids,
    )


@router.post(
    "/admin/cleanup/expired/enqueue",
    response_model=CleanupRunResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue expired-shop purge",
    description="Hand the purge to the background worker instead of running it in the request.",
)
async def enqueue_purge_expired(admin: AdminUser) -> CleanupRunResponse:
    job = await enqueue("purge_expired_shops", _job_id="purge-expired-shops")
    log.info("admin_purge_enqueued", admin_id=str(admin.id), queued=job is not None)
    return CleanupRunResponse(
        success=True,
        message="Cleanup queued" if job is not None else "Cleanup already queued",
        timestamp=utcnow(),
    )


@router.delete(
    "/admin/shops/{slug}/permanent",
    response_model=PurgeResponse,
    summary="Permanently delete shop",
    description="Purge one shop and all of its data immediately. Cannot be undone.",
)
async def purge_shop(slug: str, admin: AdminUser, service: TenantSvc) -> PurgeResponse:
    result = await service.purge_shop(slug)
    log.warning("admin_purge_shop", admin_id=str(admin.id), slug=slug)
    return PurgeResponse(
        message=f"Shop '{slug}' permanently deleted",
        deleted_count=result.deleted_count,
        shop_ids=result.shop_ids,
    )


# ============================================================
# Cron-facing routes
# ============================================================


@router.post(
    "/cleanup/expired-shops",
    response_model=CleanupRunResponse,
    summary="Trigger cleanup",
    description=(
        "Run the expired-shop cleanup. Meant for external schedulers; "
        "send X-Cleanup-Token when CLEANUP_TOKEN is configured."
    ),
)
async def trigger_cleanup(
    session_factory: SessionFactory,
    x_cleanup_token: Annotated[str | None, Header()] = None,
) -> CleanupRunResponse:
    if settings.cleanup_token and x_cleanup_token != settings.cleanup_token:
        raise UnauthorizedError("Invalid cleanup token", error_code="invalid_cleanup_token")

    log.info("cleanup_endpoint_triggered")
    summary = await run_cleanup_job(session_factory)
    return CleanupRunResponse(
        success=not summary.startswith("Cleanup failed"),
        message=summary,
        timestamp=utcnow(),
    )


@router.get(
    "/cleanup/status",
    response_model=CleanupStatusResponse,
    summary="Cleanup status",
    description="Whether the cleanup service is ready and how many shops are waiting to be purged.",
)
async def cleanup_status(service: TenantSvc) -> CleanupStatusResponse:
    expired = await service.find_expired_tenants()
    return CleanupStatusResponse(
        timestamp=utcnow(),
        retention_days=settings.shop_retention_days,
        expired_count=len(expired),
    )
