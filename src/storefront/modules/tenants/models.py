"""Tenant (shop) database models."""

import enum
from uuid import UUID

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.constants import MAX_NAME_LENGTH, MAX_SLUG_LENGTH
from storefront.core.database.base import (
    Base,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
    UUIDMixin,
)


class ShopStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    PAUSED = "paused"


class MembershipRole(str, enum.Enum):
    OWNER = "OWNER"
    COLLABORATOR = "COLLABORATOR"
    HELPER = "HELPER"
    MEMBER = "MEMBER"


class Tenant(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """A shop.

    Every shop-scoped row references this table via tenant_id. While
    deleted_at is NULL the shop is live; once set, it is hidden from
    listings and can be restored until the cleanup job purges it.
    """

    __tablename__ = "tenants"

    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[ShopStatus] = mapped_column(
        Enum(ShopStatus, native_enum=False, length=16),
        default=ShopStatus.OPEN,
        nullable=False,
    )
    publish_universal: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, slug={self.slug}, deleted_at={self.deleted_at})>"


class Membership(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A (shop, user) pairing carrying the user's role in that shop."""

    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", name="uq_membership_tenant_user"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    role: Mapped[MembershipRole] = mapped_column(
        Enum(MembershipRole, native_enum=False, length=16),
        default=MembershipRole.MEMBER,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Membership(tenant_id={self.tenant_id}, user_id={self.user_id}, role={self.role})>"
