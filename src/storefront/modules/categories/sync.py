"""Bring the persisted category forest in line with a declarative source tree.

Two strategies are available:

- ``reconcile`` upserts every source node by slug and never deletes.
  Categories that are not in the source tree (legacy or created by an
  admin) survive untouched. Safe to run on every deploy.
- ``reset`` first removes every category whose slug is not in the source
  tree, detaching products and requests that referenced them, then
  reconciles. Destructive; meant for development and staging.

The engine takes the strategy as an explicit argument. Only
``seed_categories`` reads it from configuration.
"""

import enum
from collections.abc import Sequence
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import Settings, get_settings
from storefront.core.database import atomic
from storefront.core.errors import ForbiddenError
from storefront.modules.categories.models import Category, CategoryName
from storefront.modules.categories.repos import CategoryRepository
from storefront.modules.categories.schemas import CategorySeedNode
from storefront.modules.categories.seed_tree import CATEGORY_TREE
from storefront.modules.categories.tree import collect_slugs, walk_seed_tree


log = structlog.get_logger()


class SyncStrategy(str, enum.Enum):
    RECONCILE = "reconcile"
    RESET = "reset"

    @classmethod
    def parse(cls, value: "str | SyncStrategy | None") -> "SyncStrategy":
        """Case-insensitive lookup; anything unrecognised means reconcile."""
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        if normalized:
            log.warning("unknown_sync_strategy", value=value, fallback=cls.RECONCILE.value)
        return cls.RECONCILE


def _assign(category: Category, **values: object) -> bool:
    """Set only the attributes that differ, so an unchanged row stays clean."""
    changed = False
    for key, value in values.items():
        if getattr(category, key) != value:
            setattr(category, key, value)
            changed = True
    return changed


class CategorySynchronizer:
    """Applies a source tree to the store using one session.

    Every statement of a run goes through the same session, and each
    public method wraps its writes in a single atomic block.
    """

    def __init__(self, session: AsyncSession, locale: str | None = None) -> None:
        self.session = session
        self.repo = CategoryRepository(session)
        self.locale = locale or get_settings().default_locale

    async def reconcile(self, tree: Sequence[CategorySeedNode]) -> int:
        """Upsert every node of the tree. Returns the number of nodes applied."""
        collect_slugs(tree)
        log.info("category_reconcile_started", roots=len(tree))
        async with atomic(self.session):
            applied, created, updated = await self._upsert_tree(tree)
        log.info(
            "category_reconcile_finished",
            seeded=applied,
            created=created,
            updated=updated,
        )
        return applied

    async def reset(self, tree: Sequence[CategorySeedNode]) -> int:
        """Remove categories absent from the tree, then reconcile.

        Everything happens in one transaction; a failure in any step
        leaves the store exactly as it was. Returns the number of
        categories removed.

        Raises:
            ValidationError: If the tree repeats a slug. Raised before
                anything is written.
        """
        keep = collect_slugs(tree)
        log.warning("category_reset_started", keep=len(keep))

        async with atomic(self.session):
            existing = await self.repo.list_id_slugs()
            remove: list[UUID] = [cid for cid, slug in existing if slug not in keep]

            if remove:
                products = await self.repo.detach_products(remove)
                requests = await self.repo.null_request_refs(remove)
                children = await self.repo.detach_children(remove)
                names = await self.repo.delete_names(remove)
                synonyms = await self.repo.delete_synonyms(remove)
                deleted = await self.repo.delete_categories(remove)
                log.info(
                    "categories_removed",
                    categories=deleted,
                    products_detached=products,
                    request_refs_cleared=requests,
                    children_detached=children,
                    names_deleted=names,
                    synonyms_deleted=synonyms,
                )

            applied, created, updated = await self._upsert_tree(tree)

        log.info(
            "category_reset_finished",
            removed=len(remove),
            seeded=applied,
            created=created,
            updated=updated,
        )
        return len(remove)

    async def _upsert_tree(self, tree: Sequence[CategorySeedNode]) -> tuple[int, int, int]:
        existing = await self.repo.list_by_slug()
        names = await self.repo.names_for_locale(self.locale)
        ids_by_slug: dict[str, UUID] = {}
        applied = created = updated = 0

        for placed in walk_seed_tree(tree):
            node = placed.node
            parent_id = ids_by_slug[placed.parent_slug] if placed.parent_slug else None
            category = existing.get(node.slug)

            if category is None:
                category = Category(
                    id=uuid4(),
                    slug=node.slug,
                    name=node.name,
                    icon=node.icon,
                    parent_id=parent_id,
                    level=placed.level,
                    position=placed.position,
                    is_active=True,
                )
                self.session.add(category)
                # Children inserted later reference this row.
                await self.session.flush()
                created += 1
            elif _assign(
                category,
                name=node.name,
                icon=node.icon,
                parent_id=parent_id,
                level=placed.level,
                position=placed.position,
                is_active=True,
            ):
                updated += 1

            ids_by_slug[node.slug] = category.id

            name_row = names.get(category.id)
            if name_row is None:
                self.session.add(
                    CategoryName(category_id=category.id, locale=self.locale, name=node.name)
                )
            elif name_row.name != node.name:
                name_row.name = node.name

            applied += 1

        await self.session.flush()
        return applied, created, updated


async def synchronize_categories(
    session: AsyncSession,
    tree: Sequence[CategorySeedNode],
    strategy: SyncStrategy,
    locale: str | None = None,
) -> int:
    """Run one synchronization with an explicitly chosen strategy.

    Returns the number of nodes applied for reconcile, or the number of
    categories removed for reset.
    """
    synchronizer = CategorySynchronizer(session, locale=locale)
    if strategy is SyncStrategy.RESET:
        return await synchronizer.reset(tree)
    return await synchronizer.reconcile(tree)


async def seed_categories_reconcile(
    session: AsyncSession,
    tree: Sequence[CategorySeedNode] = CATEGORY_TREE,
) -> int:
    return await synchronize_categories(session, tree, SyncStrategy.RECONCILE)


async def seed_categories_reset(
    session: AsyncSession,
    tree: Sequence[CategorySeedNode] = CATEGORY_TREE,
) -> int:
    return await synchronize_categories(session, tree, SyncStrategy.RESET)


async def seed_categories(
    session: AsyncSession,
    tree: Sequence[CategorySeedNode] = CATEGORY_TREE,
    strategy: str | SyncStrategy | None = None,
    config: Settings | None = None,
) -> int:
    """Synchronize using the configured strategy.

    When neither ``strategy`` nor ``config`` is given, settings are read
    fresh from the environment on every call, so a changed SEED_STRATEGY
    takes effect without restarting the process.

    Raises:
        ForbiddenError: If reset is requested in production without
            ALLOW_CATEGORY_RESET.
    """
    current = config or Settings()
    chosen = SyncStrategy.parse(strategy if strategy is not None else current.seed_strategy)

    if chosen is SyncStrategy.RESET and current.is_production and not current.allow_category_reset:
        log.error("category_reset_blocked", environment=current.environment)
        raise ForbiddenError(
            "Category reset is disabled in production",
            error_code="category_reset_disabled",
        )

    return await synchronize_categories(session, tree, chosen, locale=current.default_locale)
