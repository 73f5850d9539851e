"""Router with plugin pipeline (source of truth).

``Router`` extends ``BaseRouter`` with a global plugin registry, per-router
plugin instances, middleware wrapping of transition handlers, and plugin
state stored on the router instance.

Internal state
--------------
- ``_plugins``: instantiated plugins in attachment order.
- ``_plugins_by_name``: plugin code → plugin instance.
- ``_plugin_info``: per-plugin state store on the router.

Global registry
---------------
``Router.register_plugin(plugin_class, name=None)`` validates that
``plugin_class`` is a ``BasePlugin`` subclass with a ``plugin_code``.
Registering a different class under an existing code raises ``ValueError``
unless ``name`` is given explicitly (intentional replacement).
``available_plugins`` returns a shallow copy of the registry.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` looks the class up by name (``ValueError``
listing the available names when missing), instantiates it with ``config``,
applies ``on_register`` to every registration already installed (including
the not-found one), rebuilds handlers and returns ``self``. A plugin can be
attached once per router (``ValueError`` otherwise). ``__getattr__``
exposes attached plugins by name or raises ``AttributeError``.

Runtime flags and data
----------------------
Stored under ``_plugin_info[plugin_code]`` with a reserved ``"--base--"``
bucket for router-level values and one bucket per route name, each holding
``config`` and ``locals``. ``set_plugin_enabled`` / ``is_plugin_enabled`` and
``set_runtime_data`` / ``get_runtime_data`` read and write these buckets.

Wrapping pipeline
-----------------
``_wrap_handler(entry, call_next)`` orders plugins by ``plugin_order`` (stable,
so ties keep attachment order) and wraps from the innermost out: the first
plugin in that order is the outermost layer and sees the transition before
any enter hook. Each layer is guarded by ``is_plugin_enabled`` unless the
plugin is ``mandatory``.

Invariants
----------
- Plugin order is deterministic.
- Global registry changes do not mutate existing router instances.
- Plugin access via attribute never fails silently.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Type

from shoproute.core.base_router import BaseRouter
from shoproute.core.entries import RouteEntry
from shoproute.plugins._base_plugin import BasePlugin

__all__ = ["Router"]

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


class Router(BaseRouter):
    """Router with plugin registry/pipeline support."""

    __slots__ = BaseRouter.__slots__ + (
        "_plugins",
        "_plugins_by_name",
        "_plugin_info",
    )

    def __init__(self, *args, **kwargs):
        self._plugins: List[BasePlugin] = []
        self._plugins_by_name: Dict[str, BasePlugin] = {}
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined
            name: Optional override name. If provided, overwrites any existing
                  registration. If not provided, uses plugin_code and raises
                  if already registered.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> "Router":
        """Attach a plugin by name (previously registered globally)."""
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        if plugin in self._plugins_by_name:
            raise ValueError(f"Plugin '{plugin}' is already attached to router '{self.name}'")
        instance = plugin_class(router=self, **config)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        self._apply_plugin_to_entries(instance)
        self._rebuild_handlers()
        return self

    def iter_plugins(self) -> List[BasePlugin]:  # type: ignore[override]
        """Return attached plugin instances in wrapping order, outermost first."""
        return sorted(self._plugins, key=lambda plugin: plugin.plugin_order)

    def get_config(self, plugin_name: str, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Return plugin config (global + per-route overrides) for an attached plugin."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        return plugin.configuration(route_name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to router '{self.name}'")
        return plugin

    def _get_plugin_bucket(self, plugin_name: str) -> Dict[str, Any]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        bucket.setdefault("--base--", {"config": {}, "locals": {}})
        return bucket

    # ------------------------------------------------------------------
    # Runtime helpers (state stored on plugin_info)
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, route_name: str, plugin_name: str, enabled: bool = True) -> None:
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(route_name, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route_name: str, plugin_name: str) -> bool:
        bucket = self._get_plugin_bucket(plugin_name)
        entry_locals = bucket.get(route_name, {}).get("locals", {})
        if "enabled" in entry_locals:
            return bool(entry_locals["enabled"])
        base_locals = bucket.get("--base--", {}).get("locals", {})
        return bool(base_locals.get("enabled", True))

    def set_runtime_data(self, route_name: str, plugin_name: str, key: str, value: Any) -> None:
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(route_name, {"config": {}, "locals": {}})
        entry.setdefault("locals", {})[key] = value

    def get_runtime_data(
        self, route_name: str, plugin_name: str, key: str, default: Any = None
    ) -> Any:
        bucket = self._get_plugin_bucket(plugin_name)
        entry_locals = bucket.get(route_name, {}).get("locals", {})
        return entry_locals.get(key, default)

    # ------------------------------------------------------------------
    # Overrides/hooks
    # ------------------------------------------------------------------
    def _wrap_handler(self, entry: RouteEntry, call_next: Callable) -> Callable:  # type: ignore[override]
        wrapped = call_next
        for plugin in reversed(self.iter_plugins()):
            plugin_call = plugin.wrap_handler(self, entry, wrapped)
            wrapped = self._create_wrapper(plugin, entry, plugin_call, wrapped)
        return wrapped

    def _create_wrapper(
        self,
        plugin: BasePlugin,
        entry: RouteEntry,
        plugin_call: Callable,
        next_handler: Callable,
    ) -> Callable:
        if plugin.mandatory:
            return plugin_call
        key = route_key(entry)

        @wraps(next_handler)
        def wrapper(*args, **kwargs):
            if not self.is_plugin_enabled(key, plugin.name):
                return next_handler(*args, **kwargs)
            return plugin_call(*args, **kwargs)

        return wrapper

    def _apply_plugin_to_entries(self, plugin: BasePlugin) -> None:
        for entry in [*self._routes, self._not_found]:
            if plugin.name not in entry.plugins:
                entry.plugins.append(plugin.name)
            plugin.on_register(self, entry)

    def _after_entry_registered(self, entry: RouteEntry) -> None:  # type: ignore[override]
        for plugin in self._plugins:
            if plugin.name not in entry.plugins:
                entry.plugins.append(plugin.name)
            plugin.on_register(self, entry)

    def _describe_entry_extra(  # type: ignore[override]
        self, entry: RouteEntry, base_description: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Gather plugin config and metadata for a registration."""
        plugins_info: Dict[str, Dict[str, Any]] = {}
        for plugin in self.iter_plugins():
            plugin_data: Dict[str, Any] = {}
            config = plugin.configuration(route_key(entry))
            if config:
                plugin_data["config"] = config
            meta = plugin.entry_metadata(self, entry)
            if meta:
                plugin_data["metadata"] = meta
            if plugin_data:
                plugins_info[plugin.name] = plugin_data
        if plugins_info:
            return {"plugin_data": plugins_info}
        return {}


def route_key(entry: RouteEntry) -> str:
    """Key used for per-route plugin buckets: the route name, else its path."""
    return entry.name or entry.full_path
