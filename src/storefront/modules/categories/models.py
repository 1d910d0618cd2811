"""Category database models."""

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.constants import (
    MAX_ICON_LENGTH,
    MAX_LOCALE_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
)
from storefront.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class Category(Base, UUIDMixin, TimestampMixin):
    """A node in the global category forest.

    Categories are shared by every shop. The slug is unique across the
    whole forest (not just among siblings) so a category can be found
    by slug alone wherever it sits in the tree.

    Attributes:
        slug: Stable key used to match source-tree nodes on sync
        name: Display name in the default locale
        icon: Emoji or image URL
        parent_id: Parent category; NULL for roots
        level: Depth, 0 for roots, parent.level + 1 otherwise
        position: Zero-based index among siblings
        is_active: Whether the category is offered to shops
    """

    __tablename__ = "categories"

    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(MAX_ICON_LENGTH), nullable=True)
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Category(slug={self.slug}, level={self.level}, position={self.position})>"


class CategoryName(Base, UUIDMixin):
    """Localised display name of a category, one row per locale."""

    __tablename__ = "category_names"
    __table_args__ = (
        UniqueConstraint("category_id", "locale", name="uq_category_name_locale"),
    )

    category_id: Mapped[UUID] = mapped_column(
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    locale: Mapped[str] = mapped_column(String(MAX_LOCALE_LENGTH), nullable=False)
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)


class CategorySynonym(Base, UUIDMixin):
    """Alternative search term that maps to a category."""

    __tablename__ = "category_synonyms"

    category_id: Mapped[UUID] = mapped_column(
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    locale: Mapped[str] = mapped_column(String(MAX_LOCALE_LENGTH), nullable=False)
    term: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)


class CategoryRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CategoryRequest(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A shop's request for a category that does not exist yet.

    Reviewed by a platform admin; approval creates the category and
    links it through category_id.
    """

    __tablename__ = "category_requests"

    requested_by: Mapped[UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(MAX_ICON_LENGTH), nullable=True)
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id"),
        nullable=True,
    )
    status: Mapped[CategoryRequestStatus] = mapped_column(
        Enum(CategoryRequestStatus, native_enum=False, length=16),
        nullable=False,
        default=CategoryRequestStatus.PENDING,
    )
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id"),
        nullable=True,
    )
    reviewed_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    reject_note: Mapped[str | None] = mapped_column(Text, nullable=True)
