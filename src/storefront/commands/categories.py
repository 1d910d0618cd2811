"""Command group: storefront categories - sync and inspect the category tree."""

import asyncio

import typer
from rich.console import Console
from rich.tree import Tree

from storefront.commands import get_session_factory
from storefront.core.errors import AppException


console = Console()

app = typer.Typer(help="Synchronize and inspect the category tree.", no_args_is_help=True)


async def _sync(strategy: str | None) -> int:
    from storefront.modules.categories.sync import seed_categories

    async with get_session_factory()() as session:
        return await seed_categories(session, strategy=strategy)


@app.command("sync")
def sync(
    strategy: str | None = typer.Option(
        None,
        "--strategy",
        "-s",
        envvar="SEED_STRATEGY",
        help="reconcile (default, never deletes) or reset (destructive).",
    ),
) -> None:
    """Bring the stored category tree in line with the built-in tree.

    reset removes every category not in the built-in tree and is refused
    in production unless ALLOW_CATEGORY_RESET=true.
    """
    from storefront.modules.categories.sync import SyncStrategy

    chosen = SyncStrategy.parse(strategy)
    console.print(f"[bold cyan]Synchronizing categories[/bold cyan] ({chosen.value})")

    try:
        count = asyncio.run(_sync(chosen.value))
    except AppException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if chosen is SyncStrategy.RESET:
        console.print(f"[green]✓[/green] Reset complete: {count} category(ies) removed")
    else:
        console.print(f"[green]✓[/green] Reconciled {count} category(ies)")


async def _load_tree() -> list:
    from storefront.modules.catalog.repos import ProductRepository
    from storefront.modules.categories.repos import CategoryRepository
    from storefront.modules.categories.services import CategoryService

    async with get_session_factory()() as session:
        service = CategoryService(CategoryRepository(session), ProductRepository(session))
        return await service.get_tree()


@app.command("tree")
def show_tree() -> None:
    """Print the stored category tree with product totals."""
    roots = asyncio.run(_load_tree())
    if not roots:
        console.print("[yellow]No categories.[/yellow]")
        return

    tree = Tree("[bold]Categories[/bold]")
    stack = [(tree, root) for root in reversed(roots)]
    while stack:
        parent, node = stack.pop()
        label = f"{node.icon + ' ' if node.icon else ''}{node.name} [dim]({node.slug})[/dim]"
        if not node.is_active:
            label += " [yellow]inactive[/yellow]"
        branch = parent.add(f"{label} [green]{node.product_count}[/green]")
        stack.extend((branch, child) for child in reversed(node.children))

    console.print(tree)
