"""Pydantic schemas for categories and category requests."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from storefront.core.constants import MAX_ICON_LENGTH, MAX_NAME_LENGTH, MAX_SLUG_LENGTH
from storefront.modules.categories.models import CategoryRequestStatus


SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CamelModel(BaseModel):
    """Response base: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================
# Source tree
# ============================================================


class CategorySeedNode(BaseModel):
    """One node of the declarative category tree used for synchronization."""

    slug: str = Field(..., min_length=1, max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN)
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    icon: str | None = Field(None, max_length=MAX_ICON_LENGTH)
    children: list[CategorySeedNode] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category name must not be blank")
        return v


# ============================================================
# Read models
# ============================================================


class CategoryWithCounts(CamelModel):
    """Per-category product counts for one shop."""

    id: UUID
    name: str
    parent_id: UUID | None
    level: int
    count_direct: int
    count_with_descendants: int


class CategoryWithCountsList(CamelModel):
    items: list[CategoryWithCounts]


class CategoryResponse(CamelModel):
    id: UUID
    slug: str
    name: str
    icon: str | None
    parent_id: UUID | None
    level: int
    position: int
    is_active: bool


class CategoryTreeNode(CamelModel):
    """Admin view: a category with its product total and nested children."""

    id: UUID
    slug: str
    name: str
    icon: str | None
    parent_id: UUID | None
    level: int
    position: int
    is_active: bool
    product_count: int = 0
    children: list[CategoryTreeNode] = Field(default_factory=list)


class DescendantIds(CamelModel):
    category_id: UUID
    descendant_ids: list[UUID]


# ============================================================
# Admin writes
# ============================================================


class CategoryCreate(BaseModel):
    """Schema for creating a category from the admin panel."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    slug: str | None = Field(None, max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN)
    icon: str | None = Field(None, max_length=MAX_ICON_LENGTH)
    parent_id: UUID | None = None
    is_active: bool = True

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategoryUpdate(BaseModel):
    """Partial update. Fields left unset are not touched.

    parent_id is only applied when explicitly present in the payload,
    so that null ("make this a root") differs from "leave the parent".
    """

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    slug: str | None = Field(None, max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN)
    icon: str | None = Field(None, max_length=MAX_ICON_LENGTH)
    parent_id: UUID | None = None
    is_active: bool | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Category name must not be blank")
        return v


# ============================================================
# Category requests
# ============================================================


class CategoryRequestCreate(BaseModel):
    tenant_id: UUID
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = None
    icon: str | None = Field(None, max_length=MAX_ICON_LENGTH)
    parent_id: UUID | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Requested name must not be blank")
        return v


class CategoryRequestApprove(BaseModel):
    """Admin edits applied on approval; unset fields keep the requested values."""

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = None
    icon: str | None = Field(None, max_length=MAX_ICON_LENGTH)
    parent_id: UUID | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Category name must not be blank")
        return v


class CategoryRequestReject(BaseModel):
    note: str | None = None


class CategoryRequestResponse(CamelModel):
    id: UUID
    tenant_id: UUID
    requested_by: UUID
    name: str
    description: str | None
    icon: str | None
    parent_id: UUID | None
    status: CategoryRequestStatus
    category_id: UUID | None
    reviewed_by: UUID | None
    reviewed_at: datetime | None
    reject_note: str | None
    created_at: datetime


class CategoryRequestList(CamelModel):
    requests: list[CategoryRequestResponse]


class CategoryDeleted(CamelModel):
    success: bool = True
    removed: int
