"""Plugin contract used by the Router transition pipeline.

Objects
~~~~~~~
``BasePlugin``
    Base class every plugin subclasses. Responsibilities:

    - offer config helpers that delegate to the owning router's
      ``_plugin_info`` store (no hidden per-plugin globals)
    - provide optional hooks ``on_register(router, entry)`` and
      ``wrap_handler(router, entry, call_next)`` used by the Router pipeline

    Class attributes:

    - ``plugin_code`` - unique identifier used for registration (required)
    - ``plugin_description`` - human-readable description
    - ``plugin_order`` - lower values wrap further out (default 100); plugins
      with the same order keep attachment order
    - ``mandatory`` - when True the router never skips the plugin, whatever
      the per-route enable flags say

    Constructor signature: ``BasePlugin(router, **config)``; ``config`` is
    passed to ``configure()``.

    ``configure(**config)``
        Declares the accepted parameters through its signature. Subclass
        definitions are wrapped by ``__init_subclass__`` to:

        - parse ``flags`` (e.g. ``"enabled,before:off"``) into booleans
        - route the values with ``_target``: ``"--base--"`` (router level,
          default), a route name, or ``"r1,r2"`` for several routes
        - validate the call with pydantic ``validate_call``
        - write the validated values to the store

    ``configuration(route_name=None)``
        Merged view of router-level config and the per-route override.

    ``on_register`` (default no-op)
        Called once per route when it is installed, or when the plugin is
        attached to a router that already has routes.

    ``wrap_handler`` (default identity)
        Receives the router, the ``RouteEntry`` and the next callable (which
        takes a ``TransitionContext``); returns a callable with the same
        signature.

    ``entry_metadata`` (default empty)
        Extra per-route data surfaced by ``router.members()``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from pydantic import ConfigDict, validate_call

from shoproute.core.entries import RouteEntry

__all__ = ["BasePlugin"]

_VALIDATION_CONFIG = ConfigDict(arbitrary_types_allowed=True)


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() to handle flags, _target, validation and storage."""
    validated = validate_call(original_configure, config=_VALIDATION_CONFIG)

    def wrapper(
        self: "BasePlugin", *, _target: str = "--base--", flags: Optional[str] = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            for target in [t.strip() for t in _target.split(",") if t.strip()]:
                wrapper(self, _target=target, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    wrapper.__doc__ = original_configure.__doc__
    return wrapper


class BasePlugin:
    """Hook interface + configuration helpers for router plugins."""

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""
    plugin_order: int = 100
    mandatory: bool = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "--base--", {"config": {"enabled": True}, "locals": {}}
        )

    def configure(self, *, _target: str = "--base--", flags: Optional[str] = None) -> None:
        """Base configure: only ``flags`` are accepted."""
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def _write_config(self, target: str, config: Dict[str, Any]) -> None:
        if not config:
            return
        store = self._get_store()
        plugin_bucket = store.setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Read merged configuration (base + optional per-route override)."""
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("--base--", {}).get("config", {}))
        if route_name:
            merged.update(plugin_bucket.get(route_name, {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> Dict[str, bool]:
        mapping: Dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def on_register(self, router: Any, entry: RouteEntry) -> None:
        """Hook run when a route is installed."""

    def wrap_handler(self, router: Any, entry: RouteEntry, call_next: Callable) -> Callable:
        """Wrap transition handling; default passthrough."""
        return call_next

    def entry_metadata(self, router: Any, entry: RouteEntry) -> Dict[str, Any]:
        return {}

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._router, "_plugin_info")
