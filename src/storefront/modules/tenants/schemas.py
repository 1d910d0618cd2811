"""Pydantic schemas for shops and their lifecycle."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from storefront.core.constants import MAX_NAME_LENGTH, MAX_SLUG_LENGTH
from storefront.modules.tenants.models import ShopStatus


class _Camel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ShopCreate(BaseModel):
    """Schema for creating a shop. The caller becomes its OWNER."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    slug: str | None = Field(
        None,
        max_length=MAX_SLUG_LENGTH,
        pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
    )
    description: str | None = None
    publish_universal: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Shop name must not be blank")
        return v


class ShopResponse(_Camel):
    id: UUID
    slug: str
    name: str
    description: str | None
    status: ShopStatus
    publish_universal: bool
    deleted_at: datetime | None
    created_at: datetime


class ShopListResponse(_Camel):
    items: list[ShopResponse]


class ShopDeletedResponse(_Camel):
    """Returned by a soft delete: how long the owner has to change their mind."""

    success: bool = True
    message: str = "shop_deleted"
    grace_period_days: int


class ShopRestoredResponse(_Camel):
    success: bool = True
    message: str = "shop_restored"
    shop: ShopResponse


class DeletedShopResponse(_Camel):
    """A soft-deleted shop with its place in the recovery window."""

    id: UUID
    slug: str
    name: str
    deleted_at: datetime
    days_since_deletion: int
    days_remaining: int
    is_expired: bool


class DeletedShopListResponse(_Camel):
    shops: list[DeletedShopResponse]


class PurgeResponse(_Camel):
    """Operator-facing report of a purge run."""

    success: bool = True
    message: str
    deleted_count: int
    shop_ids: list[UUID]


class CleanupRunResponse(_Camel):
    """Reply to the cron-facing trigger. Failures are reported in message."""

    success: bool
    message: str
    timestamp: datetime


class CleanupStatusResponse(_Camel):
    status: str = "operational"
    message: str = "Cleanup service is ready"
    timestamp: datetime
    retention_days: int
    expired_count: int
