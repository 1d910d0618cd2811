"""Feature modules with auto-discovery."""

from importlib import import_module
from pathlib import Path

import structlog
from fastapi import APIRouter


logger = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Auto-discover and return routers from all modules.

    Scans the modules directory for packages exposing a ``router``.
    A package that also defines ``register_routes()`` has it called
    first, so its route handlers are attached only once every model
    and service module has been imported.

    Returns:
        List of FastAPI routers from discovered modules.
    """
    modules_dir = Path(__file__).parent
    routers: list[APIRouter] = []

    for path in sorted(modules_dir.iterdir()):
        if path.is_dir() and not path.name.startswith("_"):
            module = import_module(f"storefront.modules.{path.name}")
            if not hasattr(module, "router"):
                continue
            register = getattr(module, "register_routes", None)
            if register is not None:
                register()
            routers.append(module.router)
            logger.debug("module_loaded", module=path.name)

    return routers
