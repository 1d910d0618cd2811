"""Pytest configuration and shared fixtures.

Tests run against SQLite in memory (aiosqlite) unless TEST_DATABASE_URL
points somewhere else. The single in-memory connection is shared through
a StaticPool, so a test that hands the session factory to code opening
its own session must commit its setup data first.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from decimal import Decimal
from uuid import UUID

import pytest
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

import storefront.models  # noqa: F401
from storefront.api.dependencies import get_current_user_id
from storefront.core.database import Base, get_db
from storefront.core.errors import UnauthorizedError
from storefront.main import create_app
from storefront.modules.catalog.models import Product
from storefront.modules.categories.models import Category
from storefront.modules.tenants.models import Tenant
from storefront.modules.tenants.routes import get_session_factory
from storefront.modules.users.models import User
from tests.factories.records import create_shop, create_user


TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

# Stands in for the upstream Telegram auth layer.
USER_HEADER = "X-Test-User-Id"


def _enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """Foreign keys on, and explicit BEGIN so SAVEPOINTs behave."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with a fresh schema."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_transactions(engine)
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide the session shared by the test body and the app."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def app(db: AsyncSession, session_factory: async_sessionmaker[AsyncSession]):
    """Create test application instance."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    async def override_user_id(request: Request) -> UUID:
        raw = request.headers.get(USER_HEADER)
        if raw is None:
            raise UnauthorizedError()
        return UUID(raw)

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_current_user_id] = override_user_id
    application.dependency_overrides[get_session_factory] = lambda: session_factory

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Users and shops
# ============================================================


@pytest.fixture
async def user(db: AsyncSession) -> User:
    """A shop owner."""
    return await create_user(db)


@pytest.fixture
async def admin(db: AsyncSession) -> User:
    """A platform administrator."""
    return await create_user(db, is_admin=True)


@pytest.fixture
async def other_user(db: AsyncSession) -> User:
    """A user with no role in `shop`."""
    return await create_user(db)


@pytest.fixture
async def shop(db: AsyncSession, user: User) -> Tenant:
    """A live shop owned by `user`."""
    return await create_shop(db, user)


def headers_for(user: User) -> dict[str, str]:
    return {USER_HEADER: str(user.id)}


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    return headers_for(user)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return headers_for(admin)


@pytest.fixture
def other_headers(other_user: User) -> dict[str, str]:
    return headers_for(other_user)


# ============================================================
# Categories and products
# ============================================================


MakeCategory = Callable[..., Awaitable[Category]]
MakeProduct = Callable[..., Awaitable[Product]]


@pytest.fixture
def make_category(db: AsyncSession) -> MakeCategory:
    """Insert a category directly, bypassing the service."""

    async def _make(
        slug: str,
        parent: Category | None = None,
        position: int = 0,
        name: str | None = None,
    ) -> Category:
        category = Category(
            slug=slug,
            name=name or slug.replace("-", " ").title(),
            parent_id=parent.id if parent else None,
            level=parent.level + 1 if parent else 0,
            position=position,
        )
        db.add(category)
        await db.flush()
        return category

    return _make


@pytest.fixture
def make_product(db: AsyncSession) -> MakeProduct:
    """Insert a product for a shop, optionally filed under a category."""

    async def _make(
        shop: Tenant,
        category: Category | None = None,
        active: bool = True,
        title: str = "Item",
    ) -> Product:
        product = Product(
            tenant_id=shop.id,
            category_id=category.id if category else None,
            title=title,
            price=Decimal("10.00"),
            active=active,
        )
        db.add(product)
        await db.flush()
        return product

    return _make
