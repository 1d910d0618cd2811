"""Core services and cross-cutting concerns."""

from storefront.core.database import Base, atomic, get_db
from storefront.core.errors import (
    AppException,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TenantPurgedError,
    UnauthorizedError,
    ValidationError,
    register_exception_handlers,
)


__all__ = [
    # Errors
    "AppException",
    "BadRequestError",
    # Database
    "Base",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "TenantPurgedError",
    "UnauthorizedError",
    "ValidationError",
    "atomic",
    "get_db",
    "register_exception_handlers",
]
