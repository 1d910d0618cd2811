"""Integration tests for category counts, descendants and product filtering."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.modules.catalog.repos import ProductRepository
from storefront.modules.categories.repos import CategoryRepository
from storefront.modules.categories.services import CategoryService
from tests.factories.records import create_shop


@pytest.fixture
def service(db: AsyncSession) -> CategoryService:
    return CategoryService(CategoryRepository(db), ProductRepository(db))


@pytest.fixture
async def forest(make_category):
    """A > {B, C}, B > {D}."""
    a = await make_category("a")
    b = await make_category("b", parent=a, position=0)
    c = await make_category("c", parent=a, position=1)
    d = await make_category("d", parent=b)
    return a, b, c, d


class TestCountsWithDescendants:
    """Tests for list_with_counts."""

    @pytest.mark.asyncio
    async def test_counts_roll_up_to_ancestors(
        self, db: AsyncSession, service, forest, user, shop, make_product
    ) -> None:
        a, b, c, d = forest
        other_shop = await create_shop(db, user)
        await make_product(shop, a)
        await make_product(shop, b)
        await make_product(shop, b)
        await make_product(shop, b, active=False)
        await make_product(shop, d)
        await make_product(other_shop, c)

        rows = await service.list_with_counts(shop.id)

        assert [(r.id, r.count_direct, r.count_with_descendants) for r in rows] == [
            (a.id, 1, 4),
            (b.id, 2, 3),
            (c.id, 0, 0),
            (d.id, 1, 1),
        ]

    @pytest.mark.asyncio
    async def test_shop_without_products_gets_zero_counts(
        self, service, forest, shop
    ) -> None:
        rows = await service.list_categories_with_counts_for_shop(shop.id)

        assert len(rows) == 4
        assert all(r.count_with_descendants == 0 for r in rows)

    @pytest.mark.asyncio
    async def test_ordered_by_level_then_position(self, service, make_category, shop) -> None:
        second = await make_category("second", position=1)
        first = await make_category("first", position=0)
        child = await make_category("child", parent=first)

        rows = await service.list_with_counts(shop.id)

        assert [r.id for r in rows] == [first.id, second.id, child.id]
        assert [r.level for r in rows] == [0, 0, 1]


class TestResolveDescendantIds:
    """Tests for resolve_descendant_ids."""

    @pytest.mark.asyncio
    async def test_all_levels_without_root(self, service, forest) -> None:
        a, b, c, d = forest

        ids = await service.resolve_descendant_ids(a.id)

        assert set(ids) == {b.id, c.id, d.id}
        assert a.id not in ids

    @pytest.mark.asyncio
    async def test_leaf_has_none(self, service, forest) -> None:
        *_, d = forest

        assert await service.resolve_descendant_ids(d.id) == []

    @pytest.mark.asyncio
    async def test_corrupted_loop_terminates(
        self, db: AsyncSession, service, make_category
    ) -> None:
        """Verify a parent loop in stored data does not hang the walk."""
        x = await make_category("x")
        y = await make_category("y", parent=x)
        x.parent_id = y.id
        await db.flush()

        ids = await service.resolve_descendant_ids(x.id)

        assert ids == [y.id]

    @pytest.mark.asyncio
    async def test_deep_chain_resolves_fully(
        self, service, make_category, shop, make_product
    ) -> None:
        """Verify a 40-level chain is walked to the leaf and agrees with counts."""
        root = await make_category("level-0")
        parent = root
        for level in range(1, 41):
            parent = await make_category(f"level-{level}", parent=parent)
        deep = await make_product(shop, parent)

        ids = await service.resolve_descendant_ids(root.id)
        products, _ = await service.list_products(shop.id, root.id)
        rows = {r.id: r for r in await service.list_with_counts(shop.id)}

        assert len(ids) == 40
        assert parent.id in ids
        assert [p.id for p in products] == [deep.id]
        assert rows[root.id].count_with_descendants == 1


class TestListProducts:
    """Tests for descendant-aware product filtering."""

    @pytest.mark.asyncio
    async def test_category_includes_descendants(
        self, db: AsyncSession, service, forest, user, shop, make_product
    ) -> None:
        a, b, c, d = forest
        other_shop = await create_shop(db, user)
        in_a = await make_product(shop, a)
        in_d = await make_product(shop, d)
        await make_product(shop, d, active=False)
        await make_product(shop)
        await make_product(other_shop, b)

        products, category_ids = await service.list_products(shop.id, a.id)

        assert {p.id for p in products} == {in_a.id, in_d.id}
        assert set(category_ids) == {a.id, b.id, c.id, d.id}

    @pytest.mark.asyncio
    async def test_without_descendants(self, service, forest, shop, make_product) -> None:
        a, b, c, d = forest
        in_b = await make_product(shop, b)
        await make_product(shop, d)

        products, category_ids = await service.list_products(
            shop.id, b.id, include_descendants=False
        )

        assert [p.id for p in products] == [in_b.id]
        assert category_ids == [b.id]

    @pytest.mark.asyncio
    async def test_no_category_returns_all_active(
        self, service, forest, shop, make_product
    ) -> None:
        a, *_ = forest
        await make_product(shop, a)
        await make_product(shop)
        await make_product(shop, active=False)

        products, category_ids = await service.list_products(shop.id)

        assert len(products) == 2
        assert category_ids is None


class TestGetTree:
    """Tests for the admin tree."""

    @pytest.mark.asyncio
    async def test_nested_with_totals(
        self, db: AsyncSession, service, forest, user, shop, make_product
    ) -> None:
        a, b, c, d = forest
        other_shop = await create_shop(db, user)
        await make_product(shop, b)
        await make_product(shop, b, active=False)
        await make_product(other_shop, c)
        await make_product(shop, d)

        roots = await service.get_tree()

        assert [r.id for r in roots] == [a.id]
        root = roots[0]
        assert root.product_count == 4
        assert [child.id for child in root.children] == [b.id, c.id]
        assert root.children[0].product_count == 3
        assert root.children[0].children[0].id == d.id
