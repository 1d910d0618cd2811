"""Category repositories for database operations."""

from collections.abc import Collection
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, func, select, update

from storefront.api.dependencies import DBSession
from storefront.modules.catalog.models import Product
from storefront.modules.categories.models import (
    Category,
    CategoryName,
    CategoryRequest,
    CategoryRequestStatus,
    CategorySynonym,
)


class CategoryRepository:
    """Repository for the global category forest.

    Categories are not tenant-scoped; only product counts are.
    Bulk statements take a collection of ids and return the number of
    rows they touched, so callers can log what a sync or delete did.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, category: Category) -> Category:
        self.session.add(category)
        await self.session.flush()
        await self.session.refresh(category)
        return category

    async def get_by_id(self, category_id: UUID) -> Category | None:
        result = await self.session.execute(
            select(Category).where(Category.id == category_id)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Category | None:
        result = await self.session.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Category]:
        """All categories, ordered (level, position, name)."""
        result = await self.session.execute(
            select(Category).order_by(Category.level, Category.position, Category.name)
        )
        return list(result.scalars().all())

    async def list_by_slug(self) -> dict[str, Category]:
        result = await self.session.execute(select(Category))
        return {c.slug: c for c in result.scalars().all()}

    async def list_id_slugs(self) -> list[tuple[UUID, str]]:
        result = await self.session.execute(select(Category.id, Category.slug))
        return [(row.id, row.slug) for row in result.all()]

    async def parent_map(self) -> dict[UUID, UUID | None]:
        """Map of every category id to its parent id."""
        result = await self.session.execute(select(Category.id, Category.parent_id))
        return {row.id: row.parent_id for row in result.all()}

    async def children_ids(self, parent_ids: Collection[UUID]) -> list[UUID]:
        """Ids of the direct children of any of the given categories."""
        if not parent_ids:
            return []
        result = await self.session.execute(
            select(Category.id).where(Category.parent_id.in_(list(parent_ids)))
        )
        return list(result.scalars().all())

    async def next_position(self, parent_id: UUID | None) -> int:
        """First free sibling index under parent_id (or among roots)."""
        stmt = select(func.max(Category.position))
        if parent_id is None:
            stmt = stmt.where(Category.parent_id.is_(None))
        else:
            stmt = stmt.where(Category.parent_id == parent_id)
        current = (await self.session.execute(stmt)).scalar_one_or_none()
        return 0 if current is None else current + 1

    async def set_level(self, category_ids: Collection[UUID], level: int) -> int:
        if not category_ids:
            return 0
        result = await self.session.execute(
            update(Category).where(Category.id.in_(list(category_ids))).values(level=level)
        )
        return result.rowcount

    # ============================================================
    # Product counts
    # ============================================================

    async def direct_product_counts(self, tenant_id: UUID) -> dict[UUID, int]:
        """Active products of one shop grouped by category.

        Categories without a matching product are absent from the map.
        """
        result = await self.session.execute(
            select(Product.category_id, func.count(Product.id))
            .where(
                Product.tenant_id == tenant_id,
                Product.active.is_(True),
                Product.category_id.is_not(None),
            )
            .group_by(Product.category_id)
        )
        return {row[0]: row[1] for row in result.all()}

    async def product_totals(self) -> dict[UUID, int]:
        """Products per category across all shops (admin view)."""
        result = await self.session.execute(
            select(Product.category_id, func.count(Product.id))
            .where(Product.category_id.is_not(None))
            .group_by(Product.category_id)
        )
        return {row[0]: row[1] for row in result.all()}

    # ============================================================
    # Locale names
    # ============================================================

    async def names_for_locale(self, locale: str) -> dict[UUID, CategoryName]:
        result = await self.session.execute(
            select(CategoryName).where(CategoryName.locale == locale)
        )
        return {row.category_id: row for row in result.scalars().all()}

    async def upsert_name(self, category_id: UUID, locale: str, name: str) -> CategoryName:
        result = await self.session.execute(
            select(CategoryName).where(
                CategoryName.category_id == category_id,
                CategoryName.locale == locale,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = CategoryName(category_id=category_id, locale=locale, name=name)
            self.session.add(row)
        elif row.name != name:
            row.name = name
        await self.session.flush()
        return row

    # ============================================================
    # Bulk detach / delete
    # ============================================================

    async def detach_products(self, category_ids: Collection[UUID]) -> int:
        """Uncategorise products pointing at any of the given categories."""
        if not category_ids:
            return 0
        result = await self.session.execute(
            update(Product)
            .where(Product.category_id.in_(list(category_ids)))
            .values(category_id=None)
        )
        return result.rowcount

    async def null_request_refs(self, category_ids: Collection[UUID]) -> int:
        """Clear parent/created-category references held by category requests."""
        if not category_ids:
            return 0
        ids = list(category_ids)
        parents = await self.session.execute(
            update(CategoryRequest)
            .where(CategoryRequest.parent_id.in_(ids))
            .values(parent_id=None)
        )
        created = await self.session.execute(
            update(CategoryRequest)
            .where(CategoryRequest.category_id.in_(ids))
            .values(category_id=None)
        )
        return parents.rowcount + created.rowcount

    async def detach_children(self, parent_ids: Collection[UUID]) -> int:
        if not parent_ids:
            return 0
        result = await self.session.execute(
            update(Category)
            .where(Category.parent_id.in_(list(parent_ids)))
            .values(parent_id=None)
        )
        return result.rowcount

    async def delete_names(self, category_ids: Collection[UUID]) -> int:
        if not category_ids:
            return 0
        result = await self.session.execute(
            delete(CategoryName).where(CategoryName.category_id.in_(list(category_ids)))
        )
        return result.rowcount

    async def delete_synonyms(self, category_ids: Collection[UUID]) -> int:
        if not category_ids:
            return 0
        result = await self.session.execute(
            delete(CategorySynonym).where(
                CategorySynonym.category_id.in_(list(category_ids))
            )
        )
        return result.rowcount

    async def delete_categories(self, category_ids: Collection[UUID]) -> int:
        if not category_ids:
            return 0
        result = await self.session.execute(
            delete(Category).where(Category.id.in_(list(category_ids)))
        )
        return result.rowcount


class CategoryRequestRepository:
    """Repository for shop-submitted category requests."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, request: CategoryRequest) -> CategoryRequest:
        self.session.add(request)
        await self.session.flush()
        await self.session.refresh(request)
        return request

    async def get_by_id(self, request_id: UUID) -> CategoryRequest | None:
        result = await self.session.execute(
            select(CategoryRequest).where(CategoryRequest.id == request_id)
        )
        return result.scalar_one_or_none()

    async def list_requests(
        self,
        status: CategoryRequestStatus | None = None,
        tenant_id: UUID | None = None,
    ) -> list[CategoryRequest]:
        """Newest first, optionally filtered by status and shop."""
        stmt = select(CategoryRequest).order_by(CategoryRequest.created_at.desc())
        if status is not None:
            stmt = stmt.where(CategoryRequest.status == status)
        if tenant_id is not None:
            stmt = stmt.where(CategoryRequest.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, request: CategoryRequest) -> CategoryRequest:
        await self.session.flush()
        await self.session.refresh(request)
        return request


# Type aliases for dependency injection
CategoryRepo = Annotated[CategoryRepository, Depends(CategoryRepository)]
CategoryRequestRepo = Annotated[CategoryRequestRepository, Depends(CategoryRequestRepository)]
