"""Database layer - session management, base models, and mixins."""

from storefront.core.database.base import (
    Base,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
    UUIDMixin,
)
from storefront.core.database.session import (
    async_engine,
    async_session_factory,
    atomic,
    get_db,
)


__all__ = [
    "Base",
    "SoftDeleteMixin",
    "TenantMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "atomic",
    "get_db",
]
