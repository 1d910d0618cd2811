"""Pydantic schemas for products."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from storefront.modules.catalog.models import ReviewStatus


class ProductResponse(BaseModel):
    """Schema for product response data."""

    id: UUID
    tenant_id: UUID
    category_id: UUID | None
    title: str
    description: str | None
    price: Decimal
    currency: str
    stock: int
    active: bool
    publish_universal: bool
    review_status: ReviewStatus
    created_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ProductListResponse(BaseModel):
    """Products of one shop, optionally narrowed to a category subtree."""

    items: list[ProductResponse]
    category_ids: list[UUID] | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
