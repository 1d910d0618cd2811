"""Product repository for database operations."""

from collections.abc import Collection
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from storefront.api.dependencies import DBSession
from storefront.modules.catalog.models import Product


class ProductRepository:
    """Repository for Product reads. All queries are scoped to a tenant."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def list_for_tenant(
        self,
        tenant_id: UUID,
        category_ids: Collection[UUID] | None = None,
        active_only: bool = True,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Product]:
        """List a shop's products, newest first.

        Args:
            tenant_id: The shop's UUID
            category_ids: Restrict to products in any of these categories
            active_only: Skip products hidden by the owner
            limit: Page size; None returns everything
            offset: Rows to skip

        Returns:
            Matching products
        """
        stmt = select(Product).where(Product.tenant_id == tenant_id)
        if category_ids is not None:
            stmt = stmt.where(Product.category_id.in_(list(category_ids)))
        if active_only:
            stmt = stmt.where(Product.active.is_(True))
        stmt = stmt.order_by(Product.created_at.desc(), Product.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


# Type alias for dependency injection
ProductRepo = Annotated[ProductRepository, Depends(ProductRepository)]
