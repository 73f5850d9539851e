"""shoproute public API surface.

- Public exports: ``Router``, ``LayoutDispatcher``, ``MemoryConfigStore``,
  ``init_package_routes`` and the types they exchange.
- Plugin registration: the built-in plugins (``logging``, ``permission``) are
  imported for their side effect of calling ``Router.register_plugin``.
  Imports are done via ``import_module`` to avoid cycles.

Typical startup::

    store = MemoryConfigStore("shop-1", packages=packages, shops=[shop])
    router = Router(name="storefront").plug(
        "permission", authority=authority, principal=lambda: session.user_id
    )
    report = init_package_routes(router, store, renderer=renderer)
    router.go("/acme/tags")
"""

from importlib import import_module

__version__ = "0.3.0"

from .core import (
    BuildReport,
    LayoutDispatcher,
    RouteEntry,
    RouteGroup,
    Router,
    RouteTableBuilder,
    TransitionContext,
    find_layout,
    init_package_routes,
    registry_route_name,
    select_layout,
)
from .core.registry import LayoutRecord, Package, RegistryEntry, Shop
from .exceptions import (
    MalformedRegistryEntry,
    PermissionGateMissing,
    RouteNotFound,
    RouterAlreadyInitialized,
)
from .store import ConfigStore, MemoryConfigStore

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "permission"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "BuildReport",
    "ConfigStore",
    "LayoutDispatcher",
    "LayoutRecord",
    "MalformedRegistryEntry",
    "MemoryConfigStore",
    "Package",
    "PermissionGateMissing",
    "RegistryEntry",
    "RouteEntry",
    "RouteGroup",
    "RouteNotFound",
    "RouteTableBuilder",
    "Router",
    "RouterAlreadyInitialized",
    "Shop",
    "TransitionContext",
    "find_layout",
    "init_package_routes",
    "registry_route_name",
    "select_layout",
]
