"""CLI command groups."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the configured database, with logging set up."""
    import storefront.models  # noqa: F401
    from storefront.core.database import async_session_factory
    from storefront.core.logging import configure_logging

    configure_logging()
    return async_session_factory
