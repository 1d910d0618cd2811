"""Operator CLI for the storefront backend."""

import typer
from rich.console import Console

from storefront import __version__
from storefront.commands import categories, shops


console = Console()

app = typer.Typer(
    name="storefront",
    help="Operate the storefront backend: category sync and shop cleanup.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(categories.app, name="categories")
app.add_typer(shops.app, name="shops")


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """Storefront CLI - category sync and shop lifecycle maintenance."""
    if version:
        console.print(f"[bold cyan]storefront[/bold cyan] version {__version__}")
        raise typer.Exit()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
