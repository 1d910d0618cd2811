"""Integration tests for administrative category edits."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import ConflictError, NotFoundError, ValidationError
from storefront.modules.catalog.models import Product
from storefront.modules.catalog.repos import ProductRepository
from storefront.modules.categories.models import Category, CategoryName, CategoryRequest
from storefront.modules.categories.repos import CategoryRepository
from storefront.modules.categories.schemas import CategoryCreate, CategoryUpdate
from storefront.modules.categories.services import CategoryService


@pytest.fixture
def service(db: AsyncSession) -> CategoryService:
    return CategoryService(CategoryRepository(db), ProductRepository(db))


async def levels(db: AsyncSession) -> dict[str, tuple]:
    result = await db.execute(select(Category.slug, Category.level, Category.position))
    return {slug: (level, position) for slug, level, position in result.all()}


class TestCreateCategory:
    """Tests for CategoryService.create_category."""

    @pytest.mark.asyncio
    async def test_root_with_derived_slug(self, db: AsyncSession, service) -> None:
        category = await service.create_category(CategoryCreate(name="Home & Garden", icon="🏡"))

        assert category.slug == "home-garden"
        assert category.level == 0
        assert category.position == 0
        name = (
            await db.execute(
                select(CategoryName.name).where(CategoryName.category_id == category.id)
            )
        ).scalar_one()
        assert name == "Home & Garden"

    @pytest.mark.asyncio
    async def test_child_is_appended_after_siblings(self, service, make_category) -> None:
        parent = await make_category("electronics")
        await make_category("phones", parent=parent, position=0)
        await make_category("computers", parent=parent, position=1)

        category = await service.create_category(
            CategoryCreate(name="Cameras", parent_id=parent.id)
        )

        assert category.level == 1
        assert category.position == 2

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, service, make_category) -> None:
        await make_category("phones")

        with pytest.raises(ConflictError) as exc_info:
            await service.create_category(CategoryCreate(name="Phones"))

        assert exc_info.value.error_code == "slug_exists"

    @pytest.mark.asyncio
    async def test_unknown_parent(self, service) -> None:
        with pytest.raises(NotFoundError):
            await service.create_category(CategoryCreate(name="Orphan", parent_id=uuid4()))

    @pytest.mark.asyncio
    async def test_blank_name(self, service) -> None:
        with pytest.raises(ValidationError):
            await service.create_category(CategoryCreate(name="   "))


class TestUpdateCategory:
    """Tests for renames and moves."""

    @pytest.fixture
    async def chain(self, make_category):
        """a > b > c, plus a separate root d."""
        a = await make_category("a")
        b = await make_category("b", parent=a)
        c = await make_category("c", parent=b)
        d = await make_category("d", position=1)
        await make_category("d-child", parent=d)
        return a, b, c, d

    @pytest.mark.asyncio
    async def test_rename_and_toggle(self, service, chain) -> None:
        a, *_ = chain

        updated = await service.update_category(
            a.id, CategoryUpdate(name="Alpha", is_active=False)
        )

        assert updated.name == "Alpha"
        assert updated.is_active is False
        assert updated.slug == "a"

    @pytest.mark.asyncio
    async def test_move_relevels_subtree(self, db: AsyncSession, service, chain) -> None:
        a, b, c, d = chain

        moved = await service.update_category(b.id, CategoryUpdate(parent_id=d.id))

        assert moved.parent_id == d.id
        snapshot = await levels(db)
        assert snapshot["b"] == (1, 1)
        assert snapshot["c"][0] == 2

    @pytest.mark.asyncio
    async def test_move_to_root(self, db: AsyncSession, service, chain) -> None:
        a, b, c, d = chain

        await service.update_category(c.id, CategoryUpdate(parent_id=None))

        assert (await levels(db))["c"] == (0, 2)

    @pytest.mark.asyncio
    async def test_move_under_descendant_rejected(
        self, db: AsyncSession, service, chain
    ) -> None:
        a, b, c, d = chain
        a_id, c_id = a.id, c.id

        with pytest.raises(ValidationError) as exc_info:
            await service.update_category(a_id, CategoryUpdate(parent_id=c_id))

        assert exc_info.value.details["errors"][0]["field"] == "parent_id"
        parent = (
            await db.execute(select(Category.parent_id).where(Category.id == a_id))
        ).scalar_one()
        assert parent is None

    @pytest.mark.asyncio
    async def test_move_under_itself_rejected(self, service, chain) -> None:
        a, *_ = chain

        with pytest.raises(ValidationError):
            await service.update_category(a.id, CategoryUpdate(parent_id=a.id))

    @pytest.mark.asyncio
    async def test_slug_conflict(self, service, chain) -> None:
        a, *_ = chain

        with pytest.raises(ConflictError):
            await service.update_category(a.id, CategoryUpdate(slug="d"))


class TestDeleteCategory:
    """Tests for subtree deletion."""

    @pytest.mark.asyncio
    async def test_removes_subtree_and_detaches_products(
        self, db: AsyncSession, service, user, shop, make_category, make_product
    ) -> None:
        a = await make_category("a")
        b = await make_category("b", parent=a)
        c = await make_category("c", parent=b)
        keep = await make_category("keep", position=1)
        in_c = await make_product(shop, c)
        in_keep = await make_product(shop, keep)
        db.add(CategoryName(category_id=c.id, locale="en", name="C"))
        request = CategoryRequest(
            tenant_id=shop.id, requested_by=user.id, name="Sub", parent_id=b.id
        )
        db.add(request)
        await db.flush()
        a_id, keep_id, in_c_id, in_keep_id, request_id = (
            a.id,
            keep.id,
            in_c.id,
            in_keep.id,
            request.id,
        )

        removed = await service.delete_category(a_id)

        assert removed == 3
        slugs = (await db.execute(select(Category.slug))).scalars().all()
        assert slugs == ["keep"]
        products = dict((await db.execute(select(Product.id, Product.category_id))).all())
        assert products == {in_c_id: None, in_keep_id: keep_id}
        parent = (
            await db.execute(
                select(CategoryRequest.parent_id).where(CategoryRequest.id == request_id)
            )
        ).scalar_one()
        assert parent is None
        names = (
            await db.execute(select(func.count()).select_from(CategoryName))
        ).scalar_one()
        assert names == 0

    @pytest.mark.asyncio
    async def test_unknown_category(self, service) -> None:
        with pytest.raises(NotFoundError):
            await service.delete_category(uuid4())
