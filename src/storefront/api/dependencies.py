"""Shared API dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db
from storefront.core.errors import ForbiddenError, UnauthorizedError
from storefront.modules.users.models import User


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user_id(request: Request) -> UUID:
    """Get the authenticated user's ID from request state.

    Telegram init-data verification runs upstream of the routers and
    stores the resolved user on request.state.user_id.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise UnauthorizedError()
    if isinstance(user_id, UUID):
        return user_id
    try:
        return UUID(str(user_id))
    except ValueError as e:
        raise UnauthorizedError("Malformed user id") from e


CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]


async def get_current_user(user_id: CurrentUserId, db: DBSession) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise UnauthorizedError("Unknown user")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> User:
    """Allow only platform administrators."""
    if not user.is_admin:
        raise ForbiddenError("Admin access required", error_code="admin_required")
    return user


AdminUser = Annotated[User, Depends(require_admin)]
