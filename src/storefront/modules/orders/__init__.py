"""Orders module - carts and orders."""

# Module metadata
__module_info__ = {
    "name": "orders",
    "version": "1.0.0",
    "description": "Buyer carts and shop orders",
    "dependencies": ["tenants", "catalog"],
}
