"""Users module - Telegram users shared across shops."""

# Module metadata
__module_info__ = {
    "name": "users",
    "version": "1.0.0",
    "description": "Telegram users",
    "dependencies": [],
}
