"""Integration tests for shop category requests and their review."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import BadRequestError, ForbiddenError, NotFoundError
from storefront.modules.catalog.repos import ProductRepository
from storefront.modules.categories.models import (
    Category,
    CategoryRequest,
    CategoryRequestStatus,
)
from storefront.modules.categories.repos import CategoryRepository, CategoryRequestRepository
from storefront.modules.categories.schemas import CategoryRequestApprove, CategoryRequestCreate
from storefront.modules.categories.services import CategoryRequestService, CategoryService
from storefront.modules.tenants.models import MembershipRole, Tenant
from storefront.modules.tenants.repos import TenantRepository
from tests.factories.records import add_member


@pytest.fixture
def service(db: AsyncSession) -> CategoryRequestService:
    return CategoryRequestService(
        CategoryRequestRepository(db),
        CategoryService(CategoryRepository(db), ProductRepository(db)),
        TenantRepository(db),
    )


def payload(shop: Tenant, name: str = "Board Games", **kwargs) -> CategoryRequestCreate:
    return CategoryRequestCreate(tenant_id=shop.id, name=name, **kwargs)


class TestCreateRequest:
    """Tests for filing a request."""

    @pytest.mark.asyncio
    async def test_owner_files_pending_request(self, service, user, shop) -> None:
        request = await service.create_request(shop.id, user.id, payload(shop, "  Board Games "))

        assert request.status is CategoryRequestStatus.PENDING
        assert request.name == "Board Games"
        assert request.requested_by == user.id
        assert request.category_id is None

    @pytest.mark.asyncio
    async def test_helper_may_request(self, db: AsyncSession, service, shop, other_user) -> None:
        await add_member(db, shop, other_user, MembershipRole.HELPER)

        request = await service.create_request(shop.id, other_user.id, payload(shop))

        assert request.tenant_id == shop.id

    @pytest.mark.asyncio
    async def test_plain_member_is_refused(
        self, db: AsyncSession, service, shop, other_user
    ) -> None:
        await add_member(db, shop, other_user, MembershipRole.MEMBER)

        with pytest.raises(ForbiddenError) as exc_info:
            await service.create_request(shop.id, other_user.id, payload(shop))

        assert exc_info.value.error_code == "insufficient_role"

    @pytest.mark.asyncio
    async def test_outsider_is_refused(self, service, shop, other_user) -> None:
        with pytest.raises(ForbiddenError):
            await service.create_request(shop.id, other_user.id, payload(shop))

    @pytest.mark.asyncio
    async def test_deleted_shop_is_not_found(
        self, db: AsyncSession, service, user, shop
    ) -> None:
        shop.deleted_at = datetime.now(UTC)
        await db.flush()

        with pytest.raises(NotFoundError):
            await service.create_request(shop.id, user.id, payload(shop))

    @pytest.mark.asyncio
    async def test_unknown_parent(self, service, user, shop) -> None:
        with pytest.raises(NotFoundError):
            await service.create_request(shop.id, user.id, payload(shop, parent_id=uuid4()))


class TestReview:
    """Tests for approve and reject."""

    @pytest.fixture
    async def pending(self, service, user, shop, make_category) -> CategoryRequest:
        parent = await make_category("toys")
        return await service.create_request(
            shop.id,
            user.id,
            payload(shop, "Board Games", icon="🎲", parent_id=parent.id),
        )

    @pytest.mark.asyncio
    async def test_approve_creates_category(self, service, admin, pending) -> None:
        request, category = await service.approve(pending.id, admin.id)

        assert category.slug == "board-games"
        assert category.icon == "🎲"
        assert category.level == 1
        assert category.parent_id == pending.parent_id
        assert request.status is CategoryRequestStatus.APPROVED
        assert request.category_id == category.id
        assert request.reviewed_by == admin.id
        assert request.reviewed_at is not None

    @pytest.mark.asyncio
    async def test_approve_with_overrides(
        self, db: AsyncSession, service, admin, pending
    ) -> None:
        overrides = CategoryRequestApprove(name="Tabletop Games", parent_id=None)

        _, category = await service.approve(pending.id, admin.id, overrides)

        assert category.slug == "tabletop-games"
        assert category.parent_id is None
        assert category.level == 0
        assert category.icon == "🎲"

    @pytest.mark.asyncio
    async def test_second_review_is_refused(self, service, admin, pending) -> None:
        await service.approve(pending.id, admin.id)

        with pytest.raises(BadRequestError) as exc_info:
            await service.reject(pending.id, admin.id)

        assert exc_info.value.error_code == "request_already_processed"

    @pytest.mark.asyncio
    async def test_reject_keeps_note_and_creates_nothing(
        self, db: AsyncSession, service, admin, pending
    ) -> None:
        request = await service.reject(pending.id, admin.id, note="Use Toys instead")

        assert request.status is CategoryRequestStatus.REJECTED
        assert request.reject_note == "Use Toys instead"
        slugs = (await db.execute(select(Category.slug))).scalars().all()
        assert slugs == ["toys"]

    @pytest.mark.asyncio
    async def test_unknown_request(self, service, admin) -> None:
        with pytest.raises(NotFoundError):
            await service.approve(uuid4(), admin.id)


class TestListing:
    """Tests for request listings."""

    @pytest.mark.asyncio
    async def test_filter_by_status(self, service, user, admin, shop) -> None:
        first = await service.create_request(shop.id, user.id, payload(shop, "Kites"))
        second = await service.create_request(shop.id, user.id, payload(shop, "Drones"))
        await service.reject(first.id, admin.id)

        pending = await service.list_requests(CategoryRequestStatus.PENDING)

        assert [r.id for r in pending] == [second.id]
        assert len(await service.list_requests()) == 2

    @pytest.mark.asyncio
    async def test_members_see_their_shop(self, service, user, shop) -> None:
        await service.create_request(shop.id, user.id, payload(shop))

        requests = await service.list_for_tenant(shop.id, user.id)

        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_outsiders_cannot_list(self, service, shop, other_user) -> None:
        with pytest.raises(ForbiddenError) as exc_info:
            await service.list_for_tenant(shop.id, other_user.id)

        assert exc_info.value.error_code == "not_a_member"
