"""Catalog module - products and images."""

from fastapi import APIRouter


router = APIRouter(tags=["catalog"])


# Module metadata
__module_info__ = {
    "name": "catalog",
    "version": "1.0.0",
    "description": "Products, product images and uploaded images",
    "dependencies": ["tenants", "categories"],
}


def register_routes() -> None:
    """Register routes - called after all imports are complete."""
    from storefront.modules.catalog import routes  # noqa: F401
