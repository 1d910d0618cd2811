"""Category API routes."""

from uuid import UUID

from fastapi import Query, status

from storefront.api.dependencies import AdminUser, CurrentUserId
from storefront.modules.categories import router
from storefront.modules.categories.models import CategoryRequestStatus
from storefront.modules.categories.schemas import (
    CategoryCreate,
    CategoryDeleted,
    CategoryRequestApprove,
    CategoryRequestCreate,
    CategoryRequestList,
    CategoryRequestReject,
    CategoryRequestResponse,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
    CategoryWithCounts,
    CategoryWithCountsList,
    DescendantIds,
)
from storefront.modules.categories.services import CategoryRequestSvc, CategorySvc
from storefront.modules.tenants.services import TenantSvc


# ============================================================
# Shop-facing reads
# ============================================================


@router.get(
    "/shops/{tenant_id}/categories/with-counts",
    response_model=CategoryWithCountsList,
    summary="Categories with product counts",
    description=(
        "Every category with the shop's active product count, directly and "
        "including all descendants. Empty branches are included."
    ),
)
async def list_categories_with_counts(
    tenant_id: UUID,
    tenants: TenantSvc,
    service: CategorySvc,
) -> CategoryWithCountsList:
    await tenants.get_shop(tenant_id)
    rows = await service.list_with_counts(tenant_id)
    return CategoryWithCountsList(
        items=[CategoryWithCounts.model_validate(row) for row in rows]
    )


@router.get(
    "/categories/{category_id}/descendants",
    response_model=DescendantIds,
    summary="Category descendants",
    description="Ids of every category below this one. The category itself is not included.",
)
async def get_descendants(category_id: UUID, service: CategorySvc) -> DescendantIds:
    await service.get_category(category_id)
    ids = await service.resolve_descendant_ids(category_id)
    return DescendantIds(category_id=category_id, descendant_ids=ids)


# ============================================================
# Category requests
# ============================================================


@router.post(
    "/category-requests",
    response_model=CategoryRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a category",
    description="Ask the platform for a new category. Shop owners and helpers only.",
)
async def create_category_request(
    data: CategoryRequestCreate,
    user_id: CurrentUserId,
    service: CategoryRequestSvc,
) -> CategoryRequestResponse:
    request = await service.create_request(data.tenant_id, user_id, data)
    return CategoryRequestResponse.model_validate(request)


@router.get(
    "/category-requests/mine",
    response_model=CategoryRequestList,
    summary="List shop category requests",
)
async def list_my_category_requests(
    user_id: CurrentUserId,
    service: CategoryRequestSvc,
    tenant_id: UUID = Query(..., description="Shop whose requests to list"),
) -> CategoryRequestList:
    requests = await service.list_for_tenant(tenant_id, user_id)
    return CategoryRequestList(
        requests=[CategoryRequestResponse.model_validate(r) for r in requests]
    )


# ============================================================
# Admin
# ============================================================


@router.get(
    "/admin/categories",
    response_model=list[CategoryTreeNode],
    summary="Category tree",
    description="The whole category forest, nested, with product totals per subtree.",
)
async def get_category_tree(
    admin: AdminUser,  # noqa: ARG001 - required for auth
    service: CategorySvc,
) -> list[CategoryTreeNode]:
    return await service.get_tree()


@router.post(
    "/admin/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    data: CategoryCreate,
    admin: AdminUser,  # noqa: ARG001 - required for auth
    service: CategorySvc,
) -> CategoryResponse:
    category = await service.create_category(data)
    return CategoryResponse.model_validate(category)


@router.patch(
    "/admin/categories/{category_id}",
    response_model=CategoryResponse,
    summary="Update category",
    description="Rename, re-slug, toggle or move a category. Moves cannot create cycles.",
)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    admin: AdminUser,  # noqa: ARG001 - required for auth
    service: CategorySvc,
) -> CategoryResponse:
    category = await service.update_category(category_id, data)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/admin/categories/{category_id}",
    response_model=CategoryDeleted,
    summary="Delete category",
    description="Delete a category and its subtree. Their products become uncategorised.",
)
async def delete_category(
    category_id: UUID,
    admin: AdminUser,  # noqa: ARG001 - required for auth
    service: CategorySvc,
) -> CategoryDeleted:
    removed = await service.delete_category(category_id)
    return CategoryDeleted(removed=removed)


@router.get(
    "/admin/category-requests",
    response_model=CategoryRequestList,
    summary="List category requests",
)
async def list_category_requests(
    admin: AdminUser,  # noqa: ARG001 - required for auth
    service: CategoryRequestSvc,
    request_status: CategoryRequestStatus | None = Query(None, alias="status"),
) -> CategoryRequestList:
    requests = await service.list_requests(request_status)
    return CategoryRequestList(
        requests=[CategoryRequestResponse.model_validate(r) for r in requests]
    )


@router.post(
    "/admin/category-requests/{request_id}/approve",
    response_model=CategoryRequestResponse,
    summary="Approve category request",
    description="Create the requested category, optionally with admin edits.",
)
async def approve_category_request(
    request_id: UUID,
    admin: AdminUser,
    service: CategoryRequestSvc,
    data: CategoryRequestApprove | None = None,
) -> CategoryRequestResponse:
    request, _ = await service.approve(request_id, admin.id, data)
    return CategoryRequestResponse.model_validate(request)


@router.post(
    "/admin/category-requests/{request_id}/reject",
    response_model=CategoryRequestResponse,
    summary="Reject category request",
)
async def reject_category_request(
    request_id: UUID,
    admin: AdminUser,
    service: CategoryRequestSvc,
    data: CategoryRequestReject | None = None,
) -> CategoryRequestResponse:
    request = await service.reject(request_id, admin.id, data.note if data else None)
    return CategoryRequestResponse.model_validate(request)
