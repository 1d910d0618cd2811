"""Product API routes."""

from uuid import UUID

from fastapi import Query

from storefront.modules.catalog import router
from storefront.modules.catalog.schemas import ProductListResponse, ProductResponse
from storefront.modules.categories.services import CategorySvc
from storefront.modules.tenants.services import TenantSvc


@router.get(
    "/shops/{tenant_id}/products",
    response_model=ProductListResponse,
    summary="List shop products",
    description=(
        "Active products of a shop. With category_id, products filed under "
        "that category or any category below it."
    ),
)
async def list_shop_products(
    tenant_id: UUID,
    tenants: TenantSvc,
    categories: CategorySvc,
    category_id: UUID | None = Query(None, description="Filter by category subtree"),
    include_descendants: bool = Query(True, description="Include subcategories"),
) -> ProductListResponse:
    await tenants.get_shop(tenant_id)
    if category_id is not None:
        await categories.get_category(category_id)
    products, category_ids = await categories.list_products(
        tenant_id, category_id, include_descendants
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        category_ids=category_ids,
    )
