"""Error handling module with RFC 7807 Problem Details."""

from storefront.core.errors.exceptions import (
    AppException,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TenantPurgedError,
    UnauthorizedError,
    ValidationError,
)
from storefront.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "BadRequestError",
    "ConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "NotFoundError",
    "ProblemDetail",
    "TenantPurgedError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
