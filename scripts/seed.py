#!/usr/bin/env python
"""
Seed a development database: the category tree, plus optional demo shops.
"""

import argparse
import asyncio
import sys
from decimal import Decimal

from sqlalchemy import select


# Add src to path for imports
sys.path.insert(0, "src")

import storefront.models  # noqa: E402, F401
from storefront.core.database import async_engine, async_session_factory  # noqa: E402
from storefront.core.database.base import Base  # noqa: E402
from storefront.core.logging import configure_logging  # noqa: E402
from storefront.modules.catalog.models import Product  # noqa: E402
from storefront.modules.categories.models import Category  # noqa: E402
from storefront.modules.categories.sync import seed_categories  # noqa: E402
from storefront.modules.tenants.models import Membership, MembershipRole, Tenant  # noqa: E402
from storefront.modules.users.models import User  # noqa: E402


DEMO_SHOPS = [
    {
        "slug": "abebe-electronics",
        "name": "Abebe Electronics",
        "products": [("Tecno Spark 20", "phones", "8999.00"), ("USB-C cable", "accessories", "250.00")],
    },
    {
        "slug": "selam-fashion",
        "name": "Selam Fashion",
        "products": [("Habesha kemis", "women", "3500.00"), ("Linen shirt", "men", "1200.00")],
    },
]


async def create_tables() -> None:
    """Create missing tables without migrations (throwaway databases only)."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables created")


async def seed_tree(strategy: str | None) -> None:
    async with async_session_factory() as session:
        count = await seed_categories(session, strategy=strategy)
    print(f"Category sync finished ({strategy or 'configured strategy'}): {count}")


async def seed_demo() -> None:
    """Create a demo owner and a couple of shops with products."""
    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.tg_id == "100000001"))
        owner = result.scalar_one_or_none()
        if owner is None:
            owner = User(tg_id="100000001", name="Demo Owner", username="demo_owner")
            session.add(owner)
            await session.flush()
            print(f"Created demo owner: {owner.name}")

        result = await session.execute(select(Category.slug, Category.id))
        categories = {row.slug: row.id for row in result.all()}

        for data in DEMO_SHOPS:
            result = await session.execute(select(Tenant).where(Tenant.slug == data["slug"]))
            if result.scalar_one_or_none():
                print(f"Shop already exists: {data['name']}")
                continue

            shop = Tenant(slug=data["slug"], name=data["name"])
            session.add(shop)
            await session.flush()
            session.add(Membership(tenant_id=shop.id, user_id=owner.id, role=MembershipRole.OWNER))
            for title, category_slug, price in data["products"]:
                session.add(
                    Product(
                        tenant_id=shop.id,
                        category_id=categories.get(category_slug),
                        title=title,
                        price=Decimal(price),
                        stock=10,
                    )
                )
            print(f"Created shop: {shop.name}")

        await session.commit()


async def main(args: argparse.Namespace) -> None:
    """Run the requested seeding steps."""
    configure_logging()
    if args.create_tables:
        await create_tables()
    await seed_tree(args.strategy)
    if args.demo:
        await seed_demo()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the database")
    parser.add_argument(
        "--strategy",
        choices=["reconcile", "reset"],
        default=None,
        help="Category sync strategy (default: SEED_STRATEGY)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Also create demo shops and products",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables directly instead of running migrations first",
    )
    args = parser.parse_args()

    asyncio.run(main(args))
