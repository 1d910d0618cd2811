"""Product and image database models."""

import enum
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.constants import MAX_CURRENCY_LENGTH, MAX_TITLE_LENGTH
from storefront.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class ReviewStatus(str, enum.Enum):
    """Moderation state of a listing in the universal marketplace."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Image(Base, UUIDMixin, TimestampMixin):
    """An uploaded image in object storage.

    tenant_id is nullable: avatars and platform assets belong to no shop.
    Shop-scoped images are removed when the shop is purged.
    """

    __tablename__ = "images"

    tenant_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=True,
        index=True,
    )
    bucket_key: Mapped[str] = mapped_column(String(512), nullable=False)
    mime: Mapped[str] = mapped_column(String(64), nullable=False)
    size: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Product(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A listing in a shop.

    category_id is nullable; a product survives the removal of its
    category and simply becomes uncategorised.
    """

    __tablename__ = "products"

    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(MAX_TITLE_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(
        String(MAX_CURRENCY_LENGTH), nullable=False, default="ETB"
    )
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    publish_universal: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    review_status: Mapped[ReviewStatus] = mapped_column(
        Enum(ReviewStatus, native_enum=False, length=16),
        nullable=False,
        default=ReviewStatus.PENDING,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, title={self.title}, tenant_id={self.tenant_id})>"


class ProductImage(Base, UUIDMixin):
    """Ordered association between a product and its images.

    url is the legacy reference (http URL or tg:file_id) for rows that
    predate object storage.
    """

    __tablename__ = "product_images"

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id"),
        nullable=False,
        index=True,
    )
    image_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("images.id"),
        nullable=True,
    )
    url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
