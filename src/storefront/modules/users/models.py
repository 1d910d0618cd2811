"""User database models."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.constants import MAX_NAME_LENGTH, MAX_TG_ID_LENGTH
from storefront.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """A Telegram user.

    Users are global: the same person can own one shop, help out in
    another and buy from a third. Per-shop roles live on Membership.

    Attributes:
        tg_id: Telegram user ID (stored as text, Telegram IDs exceed int32)
        name: Display name from Telegram
        username: Telegram @username, if the user has one
        is_admin: Platform administrator (moderation, permanent deletes)
    """

    __tablename__ = "users"

    tg_id: Mapped[str] = mapped_column(
        String(MAX_TG_ID_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    username: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, tg_id={self.tg_id})>"
