"""Tenant repository for database operations."""

from collections.abc import Collection
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, or_, select, update

from storefront.api.dependencies import DBSession
from storefront.modules.catalog.models import Image, Product, ProductImage
from storefront.modules.categories.models import CategoryRequest
from storefront.modules.orders.models import CartItem, Order, OrderItem
from storefront.modules.tenants.models import Membership, MembershipRole, Tenant


class TenantRepository:
    """Repository for Tenant and Membership database operations.

    The purge helpers each remove one kind of dependent row for a batch
    of shops and return how many rows went. They are meant to be called
    in dependency order inside a single transaction.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, tenant: Tenant) -> Tenant:
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def add_membership(self, membership: Membership) -> Membership:
        self.session.add(membership)
        await self.session.flush()
        return membership

    async def get_by_id(self, tenant_id: UUID, include_deleted: bool = False) -> Tenant | None:
        """Get a shop by ID.

        Args:
            tenant_id: The shop's UUID
            include_deleted: Also return soft-deleted shops

        Returns:
            Tenant if found, None otherwise
        """
        stmt = select(Tenant).where(Tenant.id == tenant_id)
        if not include_deleted:
            stmt = stmt.where(Tenant.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Get a shop by slug, soft-deleted or not."""
        result = await self.session.execute(select(Tenant).where(Tenant.slug == slug))
        return result.scalar_one_or_none()

    async def list_live(self) -> list[Tenant]:
        result = await self.session.execute(
            select(Tenant).where(Tenant.deleted_at.is_(None)).order_by(Tenant.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_deleted(self, owner_id: UUID | None = None) -> list[Tenant]:
        """Soft-deleted shops, most recently deleted first.

        Args:
            owner_id: Restrict to shops this user owns
        """
        stmt = select(Tenant).where(Tenant.deleted_at.is_not(None))
        if owner_id is not None:
            stmt = stmt.join(Membership, Membership.tenant_id == Tenant.id).where(
                Membership.user_id == owner_id,
                Membership.role == MembershipRole.OWNER,
            )
        result = await self.session.execute(stmt.order_by(Tenant.deleted_at.desc()))
        return list(result.scalars().all())

    async def get_role(self, tenant_id: UUID, user_id: UUID) -> MembershipRole | None:
        result = await self.session.execute(
            select(Membership.role).where(
                Membership.tenant_id == tenant_id,
                Membership.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    # ============================================================
    # Soft delete / restore
    # ============================================================

    async def mark_deleted(self, tenant_id: UUID, when: datetime) -> int:
        """Set deleted_at unless the shop is already soft-deleted."""
        result = await self.session.execute(
            update(Tenant)
            .where(Tenant.id == tenant_id, Tenant.deleted_at.is_(None))
            .values(deleted_at=when)
        )
        return result.rowcount

    async def clear_deleted(self, tenant_id: UUID) -> int:
        """Clear deleted_at. Returns the number of rows matched (0 once purged)."""
        result = await self.session.execute(
            update(Tenant).where(Tenant.id == tenant_id).values(deleted_at=None)
        )
        return result.rowcount

    # ============================================================
    # Expiry
    # ============================================================

    async def find_expired(self, cutoff: datetime) -> list[Tenant]:
        """Soft-deleted shops whose deleted_at is older than cutoff."""
        result = await self.session.execute(
            select(Tenant)
            .where(Tenant.deleted_at.is_not(None), Tenant.deleted_at < cutoff)
            .order_by(Tenant.deleted_at)
        )
        return list(result.scalars().all())

    async def lock_expired(self, tenant_ids: Collection[UUID], cutoff: datetime) -> list[UUID]:
        """Re-check expiry for the given shops and lock their rows.

        Run inside the purge transaction, so a shop restored after it was
        first selected drops out of the batch.
        """
        if not tenant_ids:
            return []
        result = await self.session.execute(
            select(Tenant.id)
            .where(
                Tenant.id.in_(list(tenant_ids)),
                Tenant.deleted_at.is_not(None),
                Tenant.deleted_at < cutoff,
            )
            .with_for_update()
        )
        return list(result.scalars().all())

    # ============================================================
    # Purge steps (children before parents)
    # ============================================================

    async def product_ids(self, tenant_ids: Collection[UUID]) -> list[UUID]:
        result = await self.session.execute(
            select(Product.id).where(Product.tenant_id.in_(list(tenant_ids)))
        )
        return list(result.scalars().all())

    async def delete_cart_items(self, product_ids: Collection[UUID]) -> int:
        if not product_ids:
            return 0
        result = await self.session.execute(
            delete(CartItem).where(CartItem.product_id.in_(list(product_ids)))
        )
        return result.rowcount

    async def delete_order_items(
        self, product_ids: Collection[UUID], tenant_ids: Collection[UUID]
    ) -> int:
        """Order lines for the shops' products or on the shops' orders."""
        order_ids = select(Order.id).where(Order.tenant_id.in_(list(tenant_ids)))
        conditions = [OrderItem.order_id.in_(order_ids)]
        if product_ids:
            conditions.append(OrderItem.product_id.in_(list(product_ids)))
        result = await self.session.execute(
            delete(OrderItem)
            .where(or_(*conditions))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_product_images(self, product_ids: Collection[UUID]) -> int:
        if not product_ids:
            return 0
        result = await self.session.execute(
            delete(ProductImage).where(ProductImage.product_id.in_(list(product_ids)))
        )
        return result.rowcount

    async def delete_products(self, tenant_ids: Collection[UUID]) -> int:
        result = await self.session.execute(
            delete(Product).where(Product.tenant_id.in_(list(tenant_ids)))
        )
        return result.rowcount

    async def delete_orders(self, tenant_ids: Collection[UUID]) -> int:
        result = await self.session.execute(
            delete(Order).where(Order.tenant_id.in_(list(tenant_ids)))
        )
        return result.rowcount

    async def delete_memberships(self, tenant_ids: Collection[UUID]) -> int:
        result = await self.session.execute(
            delete(Membership).where(Membership.tenant_id.in_(list(tenant_ids)))
        )
        return result.rowcount

    async def delete_images(self, tenant_ids: Collection[UUID]) -> int:
        result = await self.session.execute(
            delete(Image).where(Image.tenant_id.in_(list(tenant_ids)))
        )
        return result.rowcount

    async def delete_category_requests(self, tenant_ids: Collection[UUID]) -> int:
        result = await self.session.execute(
            delete(CategoryRequest).where(CategoryRequest.tenant_id.in_(list(tenant_ids)))
        )
        return result.rowcount

    async def delete_tenants(self, tenant_ids: Collection[UUID]) -> int:
        result = await self.session.execute(
            delete(Tenant).where(Tenant.id.in_(list(tenant_ids)))
        )
        return result.rowcount


# Type alias for dependency injection
TenantRepo = Annotated[TenantRepository, Depends(TenantRepository)]
