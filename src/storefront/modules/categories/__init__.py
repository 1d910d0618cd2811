"""Categories module - the global category forest and shop category requests."""

from fastapi import APIRouter


router = APIRouter(tags=["categories"])


# Module metadata
__module_info__ = {
    "name": "categories",
    "version": "1.0.0",
    "description": "Category tree sync, product counts, admin edits and requests",
    "dependencies": ["catalog", "tenants"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from storefront.modules.categories import routes  # noqa: F401
