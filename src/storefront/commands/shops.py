"""Command group: storefront shops - soft-deleted shop maintenance."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from storefront.commands import get_session_factory


console = Console()

app = typer.Typer(help="Inspect and purge soft-deleted shops.", no_args_is_help=True)


@app.command("cleanup")
def cleanup() -> None:
    """Permanently delete shops past their recovery window.

    Always exits 0; a failed run is reported in the printed summary.
    """
    from storefront.modules.tenants.cleanup import run_cleanup_job

    summary = asyncio.run(run_cleanup_job(get_session_factory()))
    style = "red" if summary.startswith("Cleanup failed") else "green"
    console.print(f"[{style}]{summary}[/{style}]")


async def _list_deleted() -> list:
    from storefront.modules.tenants.repos import TenantRepository
    from storefront.modules.tenants.services import TenantService

    async with get_session_factory()() as session:
        return await TenantService(TenantRepository(session)).list_deleted_shops()


@app.command("deleted")
def list_deleted() -> None:
    """List soft-deleted shops and how long each has left."""
    shops = asyncio.run(_list_deleted())
    if not shops:
        console.print("[yellow]No deleted shops.[/yellow]")
        return

    table = Table(title="Deleted Shops", show_header=True)
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Deleted", no_wrap=True)
    table.add_column("Days left", justify="right")
    table.add_column("Status", no_wrap=True)

    for shop in shops:
        table.add_row(
            shop.slug,
            shop.name,
            shop.deleted_at.strftime("%Y-%m-%d %H:%M"),
            str(shop.days_remaining),
            "[red]expired[/red]" if shop.is_expired else "[green]restorable[/green]",
        )

    console.print()
    console.print(table)
    console.print()
