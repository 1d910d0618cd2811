"""Pure algorithms over the category forest.

Nothing in here touches the database. Every traversal uses an explicit
stack or frontier instead of recursion, so a deep or malformed tree
cannot exhaust the interpreter's call stack.
"""

from collections import defaultdict
from collections.abc import Callable, Hashable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar
from uuid import UUID

from storefront.core.errors import ValidationError
from storefront.modules.categories.schemas import CategorySeedNode


N = TypeVar("N")
K = TypeVar("K", bound=Hashable)
R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class PlacedNode:
    """A source-tree node together with where it lands in the forest."""

    node: CategorySeedNode
    parent_slug: str | None
    level: int
    position: int


@dataclass(frozen=True, slots=True)
class CategoryNode:
    """Minimal persisted category shape needed for counting."""

    id: UUID
    name: str
    parent_id: UUID | None
    level: int


@dataclass(frozen=True, slots=True)
class CategoryCount:
    id: UUID
    name: str
    parent_id: UUID | None
    level: int
    count_direct: int
    count_with_descendants: int


def walk_seed_tree(tree: Sequence[CategorySeedNode]) -> Iterator[PlacedNode]:
    """Depth-first, pre-order walk of a source tree.

    Parents are always yielded before their children. position is the
    node's index in its parent's children list (or in the top-level list
    for roots); level is the depth, 0 for roots.
    """
    stack = [
        PlacedNode(node=node, parent_slug=None, level=0, position=index)
        for index, node in reversed(list(enumerate(tree)))
    ]
    while stack:
        placed = stack.pop()
        yield placed
        children = placed.node.children
        for index in range(len(children) - 1, -1, -1):
            stack.append(
                PlacedNode(
                    node=children[index],
                    parent_slug=placed.node.slug,
                    level=placed.level + 1,
                    position=index,
                )
            )


def collect_slugs(tree: Sequence[CategorySeedNode]) -> set[str]:
    """Return every slug in the source tree.

    Raises:
        ValidationError: If a slug appears more than once. Slugs are
            unique across the whole forest, so a repeated slug would make
            the second node silently move the first.
    """
    slugs: set[str] = set()
    duplicates: list[str] = []
    for placed in walk_seed_tree(tree):
        slug = placed.node.slug
        if slug in slugs:
            duplicates.append(slug)
        slugs.add(slug)

    if duplicates:
        raise ValidationError(
            "Category tree contains duplicate slugs",
            errors=[
                {"field": "slug", "message": f"Duplicate slug '{slug}'"}
                for slug in sorted(set(duplicates))
            ],
        )
    return slugs


def build_children_index(items: Sequence[N], parent_of: Callable[[N], K | None]) -> dict[K | None, list[N]]:
    """Group items by parent key, keeping input order within each group."""
    index: dict[K | None, list[N]] = defaultdict(list)
    for item in items:
        index[parent_of(item)].append(item)
    return index


def aggregate_counts(
    nodes: Sequence[CategoryNode],
    direct_counts: Mapping[UUID, int],
) -> list[CategoryCount]:
    """Compute direct and subtree-inclusive product counts for every node.

    Post-order traversal from every root with a memo, so each node's
    total is computed exactly once. A node whose parent is not in
    `nodes` is treated as a root. Nodes unreachable from any root (only
    possible if the stored tree contains a cycle) fall back to their
    direct count.

    Returns:
        One CategoryCount per input node, in input order.
    """
    by_id = {node.id: node for node in nodes}
    children = build_children_index(nodes, lambda n: n.parent_id)
    totals: dict[UUID, int] = {}

    roots = [n for n in nodes if n.parent_id is None or n.parent_id not in by_id]
    for root in roots:
        stack: list[tuple[UUID, bool]] = [(root.id, False)]
        while stack:
            node_id, expanded = stack.pop()
            if node_id in totals:
                continue
            if expanded:
                totals[node_id] = direct_counts.get(node_id, 0) + sum(
                    totals.get(child.id, 0) for child in children.get(node_id, ())
                )
                continue
            stack.append((node_id, True))
            for child in children.get(node_id, ()):
                if child.id not in totals:
                    stack.append((child.id, False))

    return [
        CategoryCount(
            id=node.id,
            name=node.name,
            parent_id=node.parent_id,
            level=node.level,
            count_direct=direct_counts.get(node.id, 0),
            count_with_descendants=totals.get(node.id, direct_counts.get(node.id, 0)),
        )
        for node in nodes
    ]


def would_create_cycle(
    node_id: UUID,
    new_parent_id: UUID | None,
    parent_of: Mapping[UUID, UUID | None],
) -> bool:
    """True if making new_parent_id the parent of node_id closes a loop.

    Walks up from the proposed parent; reaching node_id means the
    proposed parent is the node itself or one of its descendants.
    """
    seen: set[UUID] = set()
    current = new_parent_id
    while current is not None and current not in seen:
        if current == node_id:
            return True
        seen.add(current)
        current = parent_of.get(current)
    return False


def relevel_subtree(
    root_id: UUID,
    root_level: int,
    children_of: Mapping[UUID | None, Sequence[UUID]],
) -> dict[UUID, int]:
    """Levels for a subtree whose root now sits at root_level."""
    levels = {root_id: root_level}
    frontier = [root_id]
    while frontier:
        next_frontier: list[UUID] = []
        for parent_id in frontier:
            for child_id in children_of.get(parent_id, ()):
                if child_id not in levels:
                    levels[child_id] = levels[parent_id] + 1
                    next_frontier.append(child_id)
        frontier = next_frontier
    return levels


def build_nested_tree(
    items: Sequence[Any],
    make: Callable[[Any], R],
    attach: Callable[[R, R], None],
) -> list[R]:
    """Assemble a flat list of rows with id/parent_id into nested nodes.

    `make` converts a row into a node and `attach(parent, child)` links
    them. Rows whose parent is missing from the list become roots, so a
    dangling parent_id never drops a subtree.
    """
    built = {item.id: make(item) for item in items}
    roots: list[R] = []
    for item in items:
        node = built[item.id]
        parent = built.get(item.parent_id) if item.parent_id is not None else None
        if parent is None:
            roots.append(node)
        else:
            attach(parent, node)
    return roots
