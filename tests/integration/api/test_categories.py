"""API tests for category reads, requests and administration."""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.utils import utcnow
from storefront.modules.categories.models import Category


@pytest.fixture
async def forest(make_category):
    """root > {left, right}, left > {leaf}."""
    root = await make_category("root")
    left = await make_category("left", parent=root, position=0)
    right = await make_category("right", parent=root, position=1)
    leaf = await make_category("leaf", parent=left)
    return root, left, right, leaf


class TestShopFacingReads:
    """Tests for counts, descendants and product filtering."""

    @pytest.mark.asyncio
    async def test_counts(self, client: AsyncClient, forest, shop, make_product) -> None:
        root, left, right, leaf = forest
        await make_product(shop, left)
        await make_product(shop, leaf)

        response = await client.get(f"/api/v1/shops/{shop.id}/categories/with-counts")

        assert response.status_code == 200
        items = {item["id"]: item for item in response.json()["items"]}
        assert items[str(root.id)]["countDirect"] == 0
        assert items[str(root.id)]["countWithDescendants"] == 2
        assert items[str(left.id)]["countWithDescendants"] == 2
        assert items[str(right.id)]["countWithDescendants"] == 0

    @pytest.mark.asyncio
    async def test_counts_for_deleted_shop(
        self, client: AsyncClient, db: AsyncSession, shop
    ) -> None:
        shop.deleted_at = utcnow()
        await db.flush()

        response = await client.get(f"/api/v1/shops/{shop.id}/categories/with-counts")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_descendants(self, client: AsyncClient, forest) -> None:
        root, left, right, leaf = forest

        response = await client.get(f"/api/v1/categories/{root.id}/descendants")

        body = response.json()
        assert body["categoryId"] == str(root.id)
        assert set(body["descendantIds"]) == {str(left.id), str(right.id), str(leaf.id)}

    @pytest.mark.asyncio
    async def test_descendants_unknown_category(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/v1/categories/{uuid4()}/descendants")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_products_by_category_subtree(
        self, client: AsyncClient, forest, shop, make_product
    ) -> None:
        root, left, right, leaf = forest
        in_leaf = await make_product(shop, leaf, title="Deep")
        await make_product(shop, right, title="Elsewhere")

        response = await client.get(
            f"/api/v1/shops/{shop.id}/products", params={"category_id": str(left.id)}
        )

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["items"]] == [str(in_leaf.id)]


class TestCategoryRequestRoutes:
    """Tests for shop category requests over HTTP."""

    @pytest.mark.asyncio
    async def test_request_and_approve(
        self, client: AsyncClient, shop, auth_headers, admin_headers
    ) -> None:
        created = await client.post(
            "/api/v1/category-requests",
            json={"tenantId": str(shop.id), "name": "Handmade"},
            headers=auth_headers,
        )
        assert created.status_code == 201
        request_id = created.json()["id"]

        pending = await client.get(
            "/api/v1/admin/category-requests",
            params={"status": "pending"},
            headers=admin_headers,
        )
        assert [r["id"] for r in pending.json()["requests"]] == [request_id]

        approved = await client.post(
            f"/api/v1/admin/category-requests/{request_id}/approve",
            json={"icon": "🧶"},
            headers=admin_headers,
        )
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"
        assert approved.json()["categoryId"] is not None

        again = await client.post(
            f"/api/v1/admin/category-requests/{request_id}/reject",
            headers=admin_headers,
        )
        assert again.status_code == 400
        assert again.json()["type"].endswith("/errors/request_already_processed")

    @pytest.mark.asyncio
    async def test_outsider_cannot_request(
        self, client: AsyncClient, shop, other_headers
    ) -> None:
        response = await client.post(
            "/api/v1/category-requests",
            json={"tenantId": str(shop.id), "name": "Handmade"},
            headers=other_headers,
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_mine(self, client: AsyncClient, shop, auth_headers, other_headers) -> None:
        await client.post(
            "/api/v1/category-requests",
            json={"tenantId": str(shop.id), "name": "Handmade"},
            headers=auth_headers,
        )

        mine = await client.get(
            "/api/v1/category-requests/mine",
            params={"tenant_id": str(shop.id)},
            headers=auth_headers,
        )
        outsider = await client.get(
            "/api/v1/category-requests/mine",
            params={"tenant_id": str(shop.id)},
            headers=other_headers,
        )

        assert len(mine.json()["requests"]) == 1
        assert outsider.status_code == 403


class TestAdminCategoryRoutes:
    """Tests for the admin category endpoints."""

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, auth_headers) -> None:
        response = await client.get("/api/v1/admin/categories", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["type"].endswith("/errors/admin_required")

    @pytest.mark.asyncio
    async def test_tree(
        self, client: AsyncClient, forest, shop, make_product, admin_headers
    ) -> None:
        root, left, right, leaf = forest
        await make_product(shop, leaf)

        response = await client.get("/api/v1/admin/categories", headers=admin_headers)

        roots = response.json()
        assert [r["slug"] for r in roots] == ["root"]
        assert roots[0]["productCount"] == 1
        assert [c["slug"] for c in roots[0]["children"]] == ["left", "right"]

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, forest, admin_headers) -> None:
        root, *_ = forest

        response = await client.post(
            "/api/v1/admin/categories",
            json={"name": "Gadgets", "parentId": str(root.id)},
            headers=admin_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "gadgets"
        assert body["level"] == 1
        assert body["position"] == 2

    @pytest.mark.asyncio
    async def test_create_duplicate_slug(self, client: AsyncClient, forest, admin_headers) -> None:
        response = await client.post(
            "/api/v1/admin/categories",
            json={"name": "Leaf"},
            headers=admin_headers,
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_move_into_own_subtree(
        self, client: AsyncClient, forest, admin_headers
    ) -> None:
        root, left, right, leaf = forest

        response = await client.patch(
            f"/api/v1/admin/categories/{root.id}",
            json={"parentId": str(leaf.id)},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "parent_id"

    @pytest.mark.asyncio
    async def test_blank_rename_is_rejected(
        self, client: AsyncClient, db: AsyncSession, forest, admin_headers
    ) -> None:
        root, *_ = forest

        response = await client.patch(
            f"/api/v1/admin/categories/{root.id}",
            json={"name": "   "},
            headers=admin_headers,
        )

        assert response.status_code == 422
        await db.refresh(root)
        assert root.name == "Root"

    @pytest.mark.asyncio
    async def test_move_to_root(self, client: AsyncClient, forest, admin_headers) -> None:
        root, left, right, leaf = forest

        response = await client.patch(
            f"/api/v1/admin/categories/{left.id}",
            json={"parentId": None},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["parentId"] is None
        assert response.json()["level"] == 0

    @pytest.mark.asyncio
    async def test_delete_subtree(
        self, client: AsyncClient, db: AsyncSession, forest, admin_headers
    ) -> None:
        root, left, right, leaf = forest

        response = await client.delete(
            f"/api/v1/admin/categories/{left.id}", headers=admin_headers
        )

        assert response.json() == {"success": True, "removed": 2}
        slugs = set((await db.execute(select(Category.slug))).scalars().all())
        assert slugs == {"root", "right"}
