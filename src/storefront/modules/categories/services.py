"""Category services: tree queries, admin edits and category requests."""

from collections import defaultdict
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from storefront.config import get_settings
from storefront.core.database import atomic
from storefront.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from storefront.core.utils import generate_slug, utcnow
from storefront.modules.catalog.models import Product
from storefront.modules.catalog.repos import ProductRepo
from storefront.modules.categories.models import (
    Category,
    CategoryRequest,
    CategoryRequestStatus,
)
from storefront.modules.categories.repos import CategoryRepo, CategoryRequestRepo
from storefront.modules.categories.schemas import (
    CategoryCreate,
    CategoryRequestApprove,
    CategoryRequestCreate,
    CategoryTreeNode,
    CategoryUpdate,
)
from storefront.modules.categories.tree import (
    CategoryCount,
    CategoryNode,
    aggregate_counts,
    build_children_index,
    build_nested_tree,
    relevel_subtree,
    would_create_cycle,
)
from storefront.modules.tenants.models import MembershipRole
from storefront.modules.tenants.repos import TenantRepo


log = structlog.get_logger()


def _children_of(parent_map: dict[UUID, UUID | None]) -> dict[UUID | None, list[UUID]]:
    index = build_children_index(list(parent_map.items()), lambda item: item[1])
    return {parent: [cid for cid, _ in items] for parent, items in index.items()}


class CategoryService:
    """Service for reading and editing the category forest."""

    def __init__(self, repo: CategoryRepo, products: ProductRepo) -> None:
        self.repo = repo
        self.products = products

    @property
    def locale(self) -> str:
        return get_settings().default_locale

    async def get_category(self, category_id: UUID) -> Category:
        category = await self.repo.get_by_id(category_id)
        if category is None:
            raise NotFoundError(
                "Category not found",
                resource="category",
                resource_id=str(category_id),
            )
        return category

    # ============================================================
    # Queries
    # ============================================================

    async def list_with_counts(self, tenant_id: UUID) -> list[CategoryCount]:
        """Every category with the shop's active product counts.

        count_direct counts products filed directly under the category;
        count_with_descendants adds the counts of its whole subtree.
        Categories are global, so the full forest is returned even where
        the shop has nothing; hiding empty branches is up to the caller.
        """
        categories = await self.repo.list_all()
        direct = await self.repo.direct_product_counts(tenant_id)
        nodes = [
            CategoryNode(id=c.id, name=c.name, parent_id=c.parent_id, level=c.level)
            for c in categories
        ]
        return aggregate_counts(nodes, direct)

    list_categories_with_counts_for_shop = list_with_counts

    async def resolve_descendant_ids(self, category_id: UUID) -> list[UUID]:
        """Ids of every category below category_id, excluding category_id itself.

        Breadth-first, one query per level, with no depth limit. Ids already
        seen are never expanded again, so corrupted parent links cannot
        make it loop.
        """
        seen = {category_id}
        descendants: list[UUID] = []
        frontier = [category_id]

        while frontier:
            next_frontier: list[UUID] = []
            for child_id in await self.repo.children_ids(frontier):
                if child_id not in seen:
                    seen.add(child_id)
                    descendants.append(child_id)
                    next_frontier.append(child_id)
            frontier = next_frontier

        return descendants

    async def list_products(
        self,
        tenant_id: UUID,
        category_id: UUID | None = None,
        include_descendants: bool = True,
    ) -> tuple[list[Product], list[UUID] | None]:
        """Active products of a shop, optionally limited to a category.

        With include_descendants the filter is the category together with
        everything below it.

        Returns:
            Tuple of (products, category ids filtered on or None)
        """
        if category_id is None:
            return await self.products.list_for_tenant(tenant_id), None

        category_ids = [category_id]
        if include_descendants:
            category_ids.extend(await self.resolve_descendant_ids(category_id))
        products = await self.products.list_for_tenant(tenant_id, category_ids=category_ids)
        return products, category_ids

    async def get_tree(self) -> list[CategoryTreeNode]:
        """The whole forest, nested, with product totals per subtree."""
        categories = await self.repo.list_all()
        counts = aggregate_counts(
            [
                CategoryNode(id=c.id, name=c.name, parent_id=c.parent_id, level=c.level)
                for c in categories
            ],
            await self.repo.product_totals(),
        )
        totals = {row.id: row.count_with_descendants for row in counts}

        def make(category: Category) -> CategoryTreeNode:
            node = CategoryTreeNode.model_validate(category)
            node.product_count = totals.get(category.id, 0)
            return node

        return build_nested_tree(
            categories,
            make,
            lambda parent, child: parent.children.append(child),
        )

    # ============================================================
    # Admin edits
    # ============================================================

    async def _ensure_slug_free(self, slug: str) -> None:
        if await self.repo.get_by_slug(slug):
            raise ConflictError(
                "Category slug already exists",
                error_code="slug_exists",
                details={"slug": slug},
            )

    async def create_category(self, data: CategoryCreate) -> Category:
        """Create a category, appended after its future siblings.

        Raises:
            ValidationError: If the name is blank or yields no slug
            ConflictError: If the slug is taken
            NotFoundError: If parent_id does not exist
        """
        name = data.name.strip()
        if not name:
            raise ValidationError(
                "Category name is required",
                errors=[{"field": "name", "message": "Must not be blank"}],
            )
        slug = data.slug or generate_slug(name)
        if not slug:
            raise ValidationError(
                "Cannot derive a slug from the category name",
                errors=[{"field": "slug", "message": "Provide a slug"}],
            )
        await self._ensure_slug_free(slug)

        level = 0
        if data.parent_id is not None:
            parent = await self.get_category(data.parent_id)
            level = parent.level + 1

        async with atomic(self.repo.session):
            category = await self.repo.create(
                Category(
                    slug=slug,
                    name=name,
                    icon=data.icon,
                    parent_id=data.parent_id,
                    level=level,
                    position=await self.repo.next_position(data.parent_id),
                    is_active=data.is_active,
                )
            )
            await self.repo.upsert_name(category.id, self.locale, name)

        log.info("category_created", category_id=str(category.id), slug=slug, level=level)
        return category

    async def update_category(self, category_id: UUID, data: CategoryUpdate) -> Category:
        """Apply a partial update, including moving the node.

        A move re-levels the whole moved subtree and appends the node at
        the end of its new sibling group.

        Raises:
            NotFoundError: If the category or the new parent does not exist
            ConflictError: If the new slug is taken
            ValidationError: If the move would put the node under itself
        """
        category = await self.get_category(category_id)
        fields = data.model_fields_set

        async with atomic(self.repo.session):
            if data.name is not None and data.name.strip() != category.name:
                category.name = data.name.strip()
                await self.repo.upsert_name(category.id, self.locale, category.name)

            if data.slug is not None and data.slug != category.slug:
                await self._ensure_slug_free(data.slug)
                category.slug = data.slug

            if "icon" in fields:
                category.icon = data.icon

            if data.is_active is not None:
                category.is_active = data.is_active

            if "parent_id" in fields and data.parent_id != category.parent_id:
                await self._move(category, data.parent_id)

            await self.repo.session.flush()

        await self.repo.session.refresh(category)
        log.info("category_updated", category_id=str(category_id), fields=sorted(fields))
        return category

    async def _move(self, category: Category, new_parent_id: UUID | None) -> None:
        parent_map = await self.repo.parent_map()

        new_level = 0
        if new_parent_id is not None:
            if would_create_cycle(category.id, new_parent_id, parent_map):
                raise ValidationError(
                    "A category cannot be moved under itself or its descendants",
                    errors=[{"field": "parent_id", "message": "Would create a cycle"}],
                )
            new_parent = await self.get_category(new_parent_id)
            new_level = new_parent.level + 1

        levels = relevel_subtree(category.id, new_level, _children_of(parent_map))
        by_level: dict[int, list[UUID]] = defaultdict(list)
        for cid, level in levels.items():
            if cid != category.id:
                by_level[level].append(cid)
        for level, ids in by_level.items():
            await self.repo.set_level(ids, level)

        category.position = await self.repo.next_position(new_parent_id)
        category.parent_id = new_parent_id
        category.level = new_level
        log.info(
            "category_moved",
            category_id=str(category.id),
            parent_id=str(new_parent_id) if new_parent_id else None,
            subtree=len(levels),
        )

    async def delete_category(self, category_id: UUID) -> int:
        """Delete a category together with its whole subtree.

        Products in any removed category become uncategorised; they are
        never deleted.

        Returns:
            Number of categories removed
        """
        category = await self.get_category(category_id)

        async with atomic(self.repo.session):
            parent_map = await self.repo.parent_map()
            depths = relevel_subtree(category.id, 0, _children_of(parent_map))
            ids = list(depths)

            products = await self.repo.detach_products(ids)
            await self.repo.null_request_refs(ids)
            await self.repo.delete_names(ids)
            await self.repo.delete_synonyms(ids)

            by_depth: dict[int, list[UUID]] = defaultdict(list)
            for cid, depth in depths.items():
                by_depth[depth].append(cid)
            for depth in sorted(by_depth, reverse=True):
                await self.repo.delete_categories(by_depth[depth])

        log.info(
            "category_deleted",
            category_id=str(category_id),
            removed=len(ids),
            products_detached=products,
        )
        return len(ids)


CategorySvc = Annotated[CategoryService, Depends(CategoryService)]


class CategoryRequestService:
    """Shops ask for missing categories; admins approve or reject."""

    def __init__(
        self,
        repo: CategoryRequestRepo,
        categories: CategorySvc,
        tenants: TenantRepo,
    ) -> None:
        self.repo = repo
        self.categories = categories
        self.tenants = tenants

    async def get_request(self, request_id: UUID) -> CategoryRequest:
        request = await self.repo.get_by_id(request_id)
        if request is None:
            raise NotFoundError(
                "Category request not found",
                resource="category_request",
                resource_id=str(request_id),
            )
        return request

    async def create_request(
        self,
        tenant_id: UUID,
        user_id: UUID,
        data: CategoryRequestCreate,
    ) -> CategoryRequest:
        """File a request on behalf of a shop.

        Raises:
            NotFoundError: If the shop is missing or deleted, or parent_id is unknown
            ForbiddenError: If the user is not the shop's OWNER or HELPER
        """
        if await self.tenants.get_by_id(tenant_id) is None:
            raise NotFoundError("Shop not found", resource="tenant", resource_id=str(tenant_id))

        role = await self.tenants.get_role(tenant_id, user_id)
        if role not in (MembershipRole.OWNER, MembershipRole.HELPER):
            raise ForbiddenError(
                "Only the shop owner or a helper can request categories",
                error_code="insufficient_role",
            )

        if data.parent_id is not None:
            await self.categories.get_category(data.parent_id)

        request = await self.repo.create(
            CategoryRequest(
                tenant_id=tenant_id,
                requested_by=user_id,
                name=data.name.strip(),
                description=data.description,
                icon=data.icon,
                parent_id=data.parent_id,
                status=CategoryRequestStatus.PENDING,
            )
        )
        log.info("category_requested", request_id=str(request.id), tenant_id=str(tenant_id))
        return request

    async def list_requests(
        self, status: CategoryRequestStatus | None = None
    ) -> list[CategoryRequest]:
        return await self.repo.list_requests(status=status)

    async def list_for_tenant(self, tenant_id: UUID, user_id: UUID) -> list[CategoryRequest]:
        """Requests filed by a shop, visible to its members only."""
        if await self.tenants.get_role(tenant_id, user_id) is None:
            raise ForbiddenError("Not a member of this shop", error_code="not_a_member")
        return await self.repo.list_requests(tenant_id=tenant_id)

    def _ensure_pending(self, request: CategoryRequest) -> None:
        if request.status is not CategoryRequestStatus.PENDING:
            raise BadRequestError(
                "Request already processed",
                error_code="request_already_processed",
                details={"status": request.status.value},
            )

    async def approve(
        self,
        request_id: UUID,
        reviewer_id: UUID,
        overrides: CategoryRequestApprove | None = None,
    ) -> tuple[CategoryRequest, Category]:
        """Create the requested category and mark the request approved.

        Admin overrides replace the requested name, icon or parent.
        """
        request = await self.get_request(request_id)
        self._ensure_pending(request)
        overrides = overrides or CategoryRequestApprove()

        async with atomic(self.repo.session):
            category = await self.categories.create_category(
                CategoryCreate(
                    name=overrides.name or request.name,
                    icon=overrides.icon if overrides.icon is not None else request.icon,
                    parent_id=(
                        overrides.parent_id
                        if "parent_id" in overrides.model_fields_set
                        else request.parent_id
                    ),
                )
            )
            request.status = CategoryRequestStatus.APPROVED
            request.category_id = category.id
            request.reviewed_by = reviewer_id
            request.reviewed_at = utcnow()
            if overrides.description is not None:
                request.description = overrides.description
            await self.repo.update(request)

        log.info(
            "category_request_approved",
            request_id=str(request_id),
            category_id=str(category.id),
            reviewer_id=str(reviewer_id),
        )
        return request, category

    async def reject(
        self,
        request_id: UUID,
        reviewer_id: UUID,
        note: str | None = None,
    ) -> CategoryRequest:
        request = await self.get_request(request_id)
        self._ensure_pending(request)

        async with atomic(self.repo.session):
            request.status = CategoryRequestStatus.REJECTED
            request.reviewed_by = reviewer_id
            request.reviewed_at = utcnow()
            request.reject_note = note
            await self.repo.update(request)

        log.info("category_request_rejected", request_id=str(request_id), reviewer_id=str(reviewer_id))
        return request


CategoryRequestSvc = Annotated[CategoryRequestService, Depends(CategoryRequestService)]
