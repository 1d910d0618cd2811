"""Tenants module - shops and their soft-delete lifecycle."""

from fastapi import APIRouter


router = APIRouter(tags=["shops"])


# Module metadata
__module_info__ = {
    "name": "tenants",
    "version": "1.0.0",
    "description": "Shops, memberships, soft delete, restore and purge",
    "dependencies": ["users", "catalog", "orders", "categories"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from storefront.modules.tenants import routes  # noqa: F401
