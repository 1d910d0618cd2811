"""Tenant service: shop creation and the soft-delete / restore / purge lifecycle.

A shop moves from live to soft-deleted when its owner deletes it. It
can be restored until the cleanup job purges it, which happens once
deleted_at is older than the retention window. Purging removes every
dependent row explicitly, children before parents, in one transaction.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import get_settings
from storefront.core.database import atomic
from storefront.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TenantPurgedError,
    ValidationError,
)
from storefront.core.utils import as_utc, generate_slug, utcnow
from storefront.modules.tenants.models import Membership, MembershipRole, Tenant
from storefront.modules.tenants.repos import TenantRepo
from storefront.modules.tenants.schemas import ShopCreate


log = structlog.get_logger()


@dataclass(frozen=True)
class PurgeResult:
    """How many shops a purge removed, and which."""

    deleted_count: int = 0
    shop_ids: list[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class DeletedShop:
    """A soft-deleted shop with its position in the recovery window."""

    id: UUID
    slug: str
    name: str
    deleted_at: datetime
    days_since_deletion: int
    days_remaining: int
    is_expired: bool


class TenantService:
    """Service for shop lifecycle operations."""

    def __init__(self, repo: TenantRepo) -> None:
        self.repo = repo

    @property
    def session(self) -> AsyncSession:
        return self.repo.session

    async def get_shop(self, tenant_id: UUID) -> Tenant:
        """Get a live shop.

        Raises:
            NotFoundError: If the shop does not exist or is soft-deleted
        """
        tenant = await self.repo.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Shop not found", resource="tenant", resource_id=str(tenant_id))
        return tenant

    async def create_shop(self, owner_id: UUID, data: ShopCreate) -> Tenant:
        """Create a shop and make owner_id its OWNER.

        Raises:
            ValidationError: If no slug can be derived from the name
            ConflictError: If the slug is taken (by a live or deleted shop)
        """
        slug = data.slug or generate_slug(data.name)
        if not slug:
            raise ValidationError(
                "Cannot derive a slug from the shop name",
                errors=[{"field": "slug", "message": "Provide a slug"}],
            )
        if await self.repo.get_by_slug(slug):
            raise ConflictError(
                "Shop slug already taken",
                error_code="slug_exists",
                details={"slug": slug},
            )

        async with atomic(self.session):
            tenant = await self.repo.create(
                Tenant(
                    slug=slug,
                    name=data.name,
                    description=data.description,
                    publish_universal=data.publish_universal,
                )
            )
            await self.repo.add_membership(
                Membership(tenant_id=tenant.id, user_id=owner_id, role=MembershipRole.OWNER)
            )

        log.info("shop_created", tenant_id=str(tenant.id), slug=slug, owner_id=str(owner_id))
        return tenant

    async def list_live_shops(self) -> list[Tenant]:
        return await self.repo.list_live()

    async def _require_owner(self, tenant_id: UUID, user_id: UUID) -> None:
        role = await self.repo.get_role(tenant_id, user_id)
        if role is not MembershipRole.OWNER:
            raise ForbiddenError(
                "Only the shop owner can do this",
                error_code="only_owner_allowed",
            )

    async def soft_delete_shop(self, tenant_id: UUID, user_id: UUID) -> int:
        """Hide a shop and start its recovery window.

        Deleting an already soft-deleted shop keeps the original
        deleted_at, so the window is not extended.

        Returns:
            The grace period in days

        Raises:
            NotFoundError: If the shop does not exist
            ForbiddenError: If user_id is not the OWNER
        """
        tenant = await self.repo.get_by_id(tenant_id, include_deleted=True)
        if tenant is None:
            raise NotFoundError("Shop not found", resource="tenant", resource_id=str(tenant_id))
        await self._require_owner(tenant_id, user_id)

        async with atomic(self.session):
            changed = await self.repo.mark_deleted(tenant_id, utcnow())

        retention = get_settings().shop_retention_days
        log.info(
            "shop_soft_deleted",
            tenant_id=str(tenant_id),
            user_id=str(user_id),
            already_deleted=not changed,
            grace_period_days=retention,
        )
        return retention

    async def restore_shop(self, tenant_id: UUID, user_id: UUID | None = None) -> Tenant:
        """Clear deleted_at on a shop.

        Works at any point before the purge removes the shop, even past
        the retention window. Restoring a live shop changes nothing.

        Args:
            tenant_id: The shop to restore
            user_id: When given, must be the shop's OWNER

        Raises:
            TenantPurgedError: If the shop no longer exists, including when
                a concurrent purge removed it before the update landed
            ForbiddenError: If user_id is not the OWNER
        """
        tenant = await self.repo.get_by_id(tenant_id, include_deleted=True)
        if tenant is None:
            raise TenantPurgedError(resource="tenant", resource_id=str(tenant_id))
        if user_id is not None:
            await self._require_owner(tenant_id, user_id)

        async with atomic(self.session):
            matched = await self.repo.clear_deleted(tenant_id)
        if matched == 0:
            log.warning("shop_restore_lost_race", tenant_id=str(tenant_id))
            raise TenantPurgedError(resource="tenant", resource_id=str(tenant_id))

        await self.session.refresh(tenant)
        log.info("shop_restored", tenant_id=str(tenant_id), user_id=str(user_id) if user_id else None)
        return tenant

    async def list_deleted_shops(
        self,
        user_id: UUID | None = None,
        now: datetime | None = None,
        retention_days: int | None = None,
    ) -> list[DeletedShop]:
        """Soft-deleted shops with days elapsed and days left.

        With user_id, only shops that user owns and that are still inside
        the window are returned (what the owner can restore). Without it,
        every soft-deleted shop is returned (admin view).
        """
        now = now or utcnow()
        retention = retention_days or get_settings().shop_retention_days
        cutoff = now - timedelta(days=retention)

        shops: list[DeletedShop] = []
        for tenant in await self.repo.list_deleted(owner_id=user_id):
            deleted_at = as_utc(tenant.deleted_at)
            expired = deleted_at < cutoff
            if user_id is not None and expired:
                continue
            days_since = (now - deleted_at).days
            shops.append(
                DeletedShop(
                    id=tenant.id,
                    slug=tenant.slug,
                    name=tenant.name,
                    deleted_at=deleted_at,
                    days_since_deletion=days_since,
                    days_remaining=max(0, retention - days_since),
                    is_expired=expired,
                )
            )
        return shops

    async def find_expired_tenants(
        self,
        retention_days: int | None = None,
        now: datetime | None = None,
    ) -> list[Tenant]:
        """Soft-deleted shops whose deleted_at is older than now - retention_days."""
        retention = retention_days or get_settings().shop_retention_days
        cutoff = (now or utcnow()) - timedelta(days=retention)
        return await self.repo.find_expired(cutoff)

    async def purge_expired_tenants(
        self,
        retention_days: int | None = None,
        now: datetime | None = None,
    ) -> PurgeResult:
        """Permanently delete every shop past its retention window.

        The candidates are logged before anything is deleted. Inside the
        transaction the expiry check is repeated with the rows locked, so
        a shop restored in between is left alone.
        """
        retention = retention_days or get_settings().shop_retention_days
        cutoff = (now or utcnow()) - timedelta(days=retention)

        expired = await self.repo.find_expired(cutoff)
        if not expired:
            log.info("no_expired_shops", retention_days=retention)
            return PurgeResult()

        log.info("expired_shops_found", count=len(expired), retention_days=retention)
        for tenant in expired:
            log.info(
                "expired_shop",
                tenant_id=str(tenant.id),
                slug=tenant.slug,
                name=tenant.name,
                deleted_at=as_utc(tenant.deleted_at).isoformat(),
            )

        async with atomic(self.session):
            shop_ids = await self.repo.lock_expired([t.id for t in expired], cutoff)
            if shop_ids:
                await self._purge(shop_ids)

        if len(shop_ids) < len(expired):
            log.warning("expired_shops_restored_before_purge", skipped=len(expired) - len(shop_ids))
        log.info("shops_purged", count=len(shop_ids), shop_ids=[str(i) for i in shop_ids])
        return PurgeResult(deleted_count=len(shop_ids), shop_ids=shop_ids)

    async def purge_shop(self, slug: str) -> PurgeResult:
        """Permanently delete one shop now, whatever its state (admin override).

        Raises:
            NotFoundError: If no shop has this slug
        """
        tenant = await self.repo.get_by_slug(slug)
        if tenant is None:
            raise NotFoundError("Shop not found", resource="tenant", resource_id=slug)

        log.warning("shop_purge_forced", tenant_id=str(tenant.id), slug=slug)
        async with atomic(self.session):
            await self._purge([tenant.id])

        log.info("shops_purged", count=1, shop_ids=[str(tenant.id)])
        return PurgeResult(deleted_count=1, shop_ids=[tenant.id])

    async def _purge(self, tenant_ids: list[UUID]) -> None:
        """Delete the shops and everything hanging off them.

        Must run inside a transaction; the order is fixed so no step
        leaves a row pointing at one already deleted.
        """
        repo = self.repo
        product_ids = await repo.product_ids(tenant_ids)
        log.info("purge_products_collected", count=len(product_ids))

        steps = (
            ("cart_items", lambda: repo.delete_cart_items(product_ids)),
            ("order_items", lambda: repo.delete_order_items(product_ids, tenant_ids)),
            ("product_images", lambda: repo.delete_product_images(product_ids)),
            ("products", lambda: repo.delete_products(tenant_ids)),
            ("orders", lambda: repo.delete_orders(tenant_ids)),
            ("memberships", lambda: repo.delete_memberships(tenant_ids)),
            ("images", lambda: repo.delete_images(tenant_ids)),
            ("category_requests", lambda: repo.delete_category_requests(tenant_ids)),
            ("tenants", lambda: repo.delete_tenants(tenant_ids)),
        )
        for table, step in steps:
            count = await step()
            log.info("purge_step", table=table, deleted=count)


# Type alias for dependency injection
TenantSvc = Annotated[TenantService, Depends(TenantService)]
