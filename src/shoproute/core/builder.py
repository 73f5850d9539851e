"""Route table builder (source of truth).

Turns the package registries held by the config store into registrations on
an explicitly passed router, once per process start (or explicit
reinitialization).

Build sequence
--------------
0. Refuse to build (``PermissionGateMissing``) unless the router carries the
   ``permission`` plugin.
1. Load every package from the store.
2. Tenant prefix: ``"/" + shop_name().lower()``.
3. Index route ``"/"`` named ``"index"`` in the ``"shop"`` group, no prefix;
   its action dispatches with default render options.
4. For each package and each raw registry item:

   - a mapping without ``route`` → skipped (recorded, logged at DEBUG: many
     registry items are not routes at all);
   - not a mapping, or fails validation → skipped (recorded, logged at
     WARNING);
   - no route name (package without a name) → skipped (recorded);
   - otherwise a pending registration carrying the route name,
     template/layout/workflow, triggers and an action that calls the
     dispatcher with a fresh copy of those render options.

5. Deduplicate each package's pending registrations:

   - ``"identity"`` (default): collection membership over the constructed
     records, so only the very same record collapses. Two records built from
     identical registry items both survive.
   - ``"path_name"``: first record wins per ``(path, route name)``.

6. Install survivors under the tenant-prefixed group.
7. Install the not-found action (dispatch with ``template="notFound"``), the
   extra global ``enter_hooks`` and call ``router.ensure_initialized()``,
   which initializes the first time and reloads afterwards.

Nothing raises to the caller for bad registry data; the returned
:class:`BuildReport` is the audit trail.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from shoproute.exceptions import MalformedRegistryEntry, PermissionGateMissing

from .entries import RouteEntry
from .layout import NOT_FOUND_VIEW, LayoutDispatcher
from .naming import registry_route_name
from .registry import EntryKind, Package, RegistryEntry, parse_registry_entry

__all__ = ["BuildReport", "RouteTableBuilder", "SkippedItem", "init_package_routes"]

DEDUPE_MODES = ("identity", "path_name")
GATE_PLUGIN = "permission"

logger = logging.getLogger(__name__)


@dataclass
class SkippedItem:
    package: Optional[str]
    reason: str
    item: Any = None


@dataclass
class BuildReport:
    prefix: str
    index: Optional[RouteEntry] = None
    installed: List[RouteEntry] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)
    initialized: bool = False


@dataclass(eq=False)
class _PendingRoute:
    path: str
    kind: EntryKind
    options: Dict[str, Any]

    @property
    def name(self) -> str:
        return self.options["name"]


class RouteTableBuilder:
    """Build the storefront route table from installed packages."""

    def __init__(
        self,
        router: Any,
        store: Any,
        dispatcher: Callable[..., Any],
        *,
        enter_hooks: Iterable[Callable] = (),
        dedupe: str = "identity",
        group_name: str = "shop",
    ):
        if dedupe not in DEDUPE_MODES:
            raise ValueError(f"dedupe must be one of {', '.join(DEDUPE_MODES)} (got {dedupe!r})")
        self.router = router
        self.store = store
        self.dispatcher = dispatcher
        self.enter_hooks = list(enter_hooks)
        self.dedupe = dedupe
        self.group_name = group_name

    def tenant_prefix(self) -> str:
        return "/" + (self.store.shop_name() or "").lower()

    def build(self) -> BuildReport:
        """Install the route table and initialize (or reload) the router.

        Raises:
            PermissionGateMissing: the router has no ``permission`` plugin, so
                transitions would never be checked.
        """
        if not any(plugin.name == GATE_PLUGIN for plugin in self.router.iter_plugins()):
            raise PermissionGateMissing(
                f"Router '{self.router.name}' has no '{GATE_PLUGIN}' plugin; "
                f"call router.plug('{GATE_PLUGIN}', authority=...) before building routes"
            )
        packages = [self._as_package(raw) for raw in self.store.packages()]
        report = BuildReport(prefix=self.tenant_prefix())

        shop = self.router.group(name=self.group_name)
        report.index = shop.route("/", name="index", action=self._action(None))

        tenant = self.router.group(name=self.group_name, prefix=report.prefix)
        for package in packages:
            pending = self._package_routes(package, report)
            for route in self._deduplicate(pending):
                report.installed.append(tenant.route(route.path, **route.options))

        self.router.not_found = {"action": self._action({"template": NOT_FOUND_VIEW})}
        if self.enter_hooks:
            self.router.triggers.enter(self.enter_hooks)
        report.initialized = self.router.ensure_initialized()
        logger.info(
            "route table for %s: %d routes from %d packages, %d registry items skipped",
            report.prefix,
            len(report.installed),
            len(packages),
            len(report.skipped),
        )
        return report

    def _package_routes(self, package: Package, report: BuildReport) -> List[_PendingRoute]:
        pending: List[_PendingRoute] = []
        for item in package.registry:
            if isinstance(item, (Mapping, RegistryEntry)) and not _route_of(item):
                logger.debug("registry item without route in %s skipped", package.name)
                report.skipped.append(SkippedItem(package.name, "missing route", item))
                continue
            try:
                entry = parse_registry_entry(package.name, item)
            except MalformedRegistryEntry as exc:
                logger.warning("%s; skipped", exc)
                report.skipped.append(SkippedItem(package.name, exc.reason, item))
                continue
            route_name = registry_route_name(package.name, entry)
            if route_name is None:
                logger.warning("registry route %s has no resolvable name; skipped", entry.route)
                report.skipped.append(SkippedItem(package.name, "no route name", item))
                continue
            render_options = entry.render_options()
            pending.append(
                _PendingRoute(
                    path=entry.route,
                    kind=entry.kind,
                    options={
                        "name": route_name,
                        **render_options,
                        "triggers_enter": list(entry.triggers_enter),
                        "triggers_exit": list(entry.triggers_exit),
                        "action": self._action(render_options),
                    },
                )
            )
        return pending

    def _deduplicate(self, pending: List[_PendingRoute]) -> List[_PendingRoute]:
        if self.dedupe == "identity":
            return list(dict.fromkeys(pending))
        seen = set()
        unique: List[_PendingRoute] = []
        for route in pending:
            key = (route.path, route.name)
            if key in seen:
                logger.debug("duplicate route %s (%s) dropped", route.path, route.name)
                continue
            seen.add(key)
            unique.append(route)
        return unique

    def _action(self, render_options: Optional[Mapping[str, Any]]) -> Callable[..., Any]:
        def action(params: Any = None, query: Any = None) -> Any:
            return self.dispatcher(dict(render_options) if render_options else {})

        return action

    @staticmethod
    def _as_package(raw: Any) -> Package:
        if isinstance(raw, Package):
            return raw
        return Package.model_validate(dict(raw))


def init_package_routes(
    router: Any,
    store: Any,
    dispatcher: Optional[Callable[..., Any]] = None,
    *,
    renderer: Any = None,
    **options: Any,
) -> BuildReport:
    """Startup entrypoint: build the route table and initialize the router.

    Either pass a ``dispatcher`` or a ``renderer`` to build the default
    :class:`LayoutDispatcher` with. Remaining keyword arguments go to
    :class:`RouteTableBuilder`. ``router`` must already carry the ``permission``
    plugin (``PermissionGateMissing`` otherwise).
    """
    if dispatcher is None:
        if renderer is None:
            raise ValueError("init_package_routes() needs a dispatcher or a renderer")
        dispatcher = LayoutDispatcher(router, store, renderer)
    return RouteTableBuilder(router, store, dispatcher, **options).build()


def _route_of(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get("route")
    return getattr(item, "route", None)
