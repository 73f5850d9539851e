"""Plugin-free navigation runtime (source of truth).

The module exposes :class:`BaseRouter`, an explicitly owned route table plus
the navigation loop that runs transitions against it, and :class:`Triggers`,
the global enter/exit hook lists. Subclasses add middleware but must preserve
these semantics.

Constructor and slots
---------------------
``BaseRouter(name=None)``

- Slots: ``name``, ``triggers``, ``_routes`` (ordered registrations),
  ``_by_name`` (route name → last registration with that name),
  ``_handlers`` (registration → wrapped transition callable),
  ``_not_found`` (dedicated registration named ``"notFound"``),
  ``_current`` (latest ``TransitionContext``), ``_initialized``,
  ``_pending`` (paths requested before ``initialize()``).

Registration
------------
``group(name=None, prefix=None)`` returns a :class:`RouteGroup`;
``group.route(path, **options)`` and the ungrouped ``route(path, **options)``
both end in ``add_route``:

- ``name``, ``action``, ``triggers_enter``/``triggers_exit`` (camelCase
  aliases accepted) are lifted out; every other option lands in
  ``entry.options``.
- Name collisions are allowed: both registrations stay in ``_routes``,
  lookup by name returns the last one and a warning is logged.
- ``_after_entry_registered`` runs, then the handler table is rebuilt.

``not_found`` accepts a callable or a mapping with ``action`` and optional
triggers and installs it as the registration used when nothing matches. It is
never part of ``routes``.

Lifecycle
---------
- ``initialize()`` marks the table ready and replays, in order, every
  ``go()`` received before; a second call raises
  ``RouterAlreadyInitialized``.
- ``reload()`` navigates again to the current path so a changed table takes
  effect.
- ``ensure_initialized()`` initializes once and reloads afterwards; returns
  True only when it initialized.

Navigation
----------
``go(path)``:

1. before initialization: queue ``path`` and return None;
2. split the query string, match ``_routes`` in registration order (first
   match wins) or fall back to ``not_found``;
3. run the previous transition's exit hooks (route hooks, then global) and
   tear it down (stops the computations it owns);
4. store the new ``TransitionContext`` as ``current()`` and call the wrapped
   handler, which runs global enter hooks, the route's enter hooks and
   finally ``action(params, query)``.

Hooks receive the context. Nothing in this loop swallows exceptions.

Introspection
-------------
``members()`` describes the table: router name, initialization state, each
registration (name, path, full path, group, options, plugins, extra
description from ``_describe_entry_extra``) and plugin info.

Hooks for subclasses
--------------------
``_wrap_handler``, ``_after_entry_registered``, ``_describe_entry_extra``,
``iter_plugins``. Default implementations are no-ops/passthrough.
"""

from __future__ import annotations

import inspect
import logging
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from shoproute.exceptions import RouteNotFound, RouterAlreadyInitialized

from .entries import RouteEntry, TransitionContext
from .group import RouteGroup
from .paths import split_query

__all__ = ["BaseRouter", "Triggers", "NOT_FOUND_NAME"]

NOT_FOUND_NAME = "notFound"

logger = logging.getLogger(__name__)


class Triggers:
    """Global hooks run on every transition."""

    __slots__ = ("_enter", "_exit")

    def __init__(self) -> None:
        self._enter: List[Callable] = []
        self._exit: List[Callable] = []

    def enter(self, hooks: Iterable[Callable], *, first: bool = False) -> None:
        hooks = _as_hook_list(hooks)
        self._enter = hooks + self._enter if first else self._enter + hooks

    def exit(self, hooks: Iterable[Callable]) -> None:
        self._exit = self._exit + _as_hook_list(hooks)

    @property
    def enter_hooks(self) -> Tuple[Callable, ...]:
        return tuple(self._enter)

    @property
    def exit_hooks(self) -> Tuple[Callable, ...]:
        return tuple(self._exit)


class BaseRouter:
    """Plugin-free route table bound to a navigation loop."""

    __slots__ = (
        "name",
        "triggers",
        "_routes",
        "_by_name",
        "_handlers",
        "_not_found",
        "_current",
        "_initialized",
        "_pending",
    )

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self.triggers = Triggers()
        self._routes: List[RouteEntry] = []
        self._by_name: Dict[str, RouteEntry] = {}
        self._handlers: Dict[RouteEntry, Callable] = {}
        self._not_found = RouteEntry(name=NOT_FOUND_NAME, path="*", router=self)
        self._current: Optional[TransitionContext] = None
        self._initialized = False
        self._pending: List[str] = []
        self._after_entry_registered(self._not_found)
        self._rebuild_handlers()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def group(self, name: Optional[str] = None, prefix: Optional[str] = None) -> RouteGroup:
        return RouteGroup(self, name=name, prefix=prefix)

    def route(self, path: str, **options: Any) -> RouteEntry:
        return self.add_route(path, **options)

    def add_route(
        self,
        path: str,
        *,
        group: Optional[RouteGroup] = None,
        name: Optional[str] = None,
        action: Optional[Callable] = None,
        **options: Any,
    ) -> RouteEntry:
        """Install one registration and return it.

        Raises:
            ValueError: when ``path`` is empty.
        """
        if not path:
            raise ValueError("Route path cannot be empty")
        triggers_enter = _pop_hooks(options, "triggers_enter", "triggersEnter")
        triggers_exit = _pop_hooks(options, "triggers_exit", "triggersExit")
        entry = RouteEntry(
            name=name,
            path=path,
            router=self,
            prefix=group.prefix if group else "",
            group=group.name if group else None,
            action=action,
            options=dict(options),
            triggers_enter=triggers_enter,
            triggers_exit=triggers_exit,
        )
        if name and name in self._by_name:
            logger.warning(
                "Route name collision on '%s': %s shadows %s",
                name,
                entry.full_path,
                self._by_name[name].full_path,
            )
        self._routes.append(entry)
        if name:
            self._by_name[name] = entry
        self._after_entry_registered(entry)
        self._rebuild_handlers()
        return entry

    @property
    def not_found(self) -> RouteEntry:
        return self._not_found

    @not_found.setter
    def not_found(self, config: Any) -> None:
        if callable(config):
            config = {"action": config}
        options = dict(config or {})
        entry = RouteEntry(
            name=NOT_FOUND_NAME,
            path="*",
            router=self,
            action=options.pop("action", None),
            triggers_enter=_pop_hooks(options, "triggers_enter", "triggersEnter"),
            triggers_exit=_pop_hooks(options, "triggers_exit", "triggersExit"),
            options=options,
        )
        self._not_found = entry
        self._after_entry_registered(entry)
        self._rebuild_handlers()

    # ------------------------------------------------------------------
    # Handler table
    # ------------------------------------------------------------------
    def _rebuild_handlers(self) -> None:
        handlers: Dict[RouteEntry, Callable] = {}
        for entry in [*self._routes, self._not_found]:
            handlers[entry] = self._wrap_handler(entry, partial(self._run_transition, entry))
        self._handlers = handlers

    def _wrap_handler(
        self, entry: RouteEntry, call_next: Callable
    ) -> Callable:  # pragma: no cover - overridden by plugin routers
        return call_next

    def _run_transition(self, entry: RouteEntry, context: TransitionContext) -> TransitionContext:
        for hook in self.triggers.enter_hooks:
            hook(context)
        for hook in entry.triggers_enter:
            hook(context)
        if entry.action is not None:
            entry.action(context.params, context.query)
        return context

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        if self._initialized:
            raise RouterAlreadyInitialized(f"Router '{self.name}' is already initialized")
        self._initialized = True
        pending, self._pending = self._pending, []
        logger.debug("router %s initialized with %d routes", self.name, len(self._routes))
        for path in pending:
            self._navigate(path)

    def reload(self) -> Optional[TransitionContext]:
        if self._current is None:
            return None
        return self._navigate(self._current.path_with_query())

    def ensure_initialized(self) -> bool:
        if not self._initialized:
            self.initialize()
            return True
        self.reload()
        return False

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def go(self, path: str) -> Optional[TransitionContext]:
        if not self._initialized:
            logger.debug("navigation to %s deferred until initialize()", path)
            self._pending.append(path)
            return None
        return self._navigate(path)

    def _navigate(self, path: str) -> TransitionContext:
        base, query = split_query(path)
        entry, params = self.match(base)
        if entry is None:
            entry = self._not_found
        context = TransitionContext(path=base, route=entry, params=params, query=query)
        previous = self._current
        if previous is not None:
            self._leave(previous)
        self._current = context
        self._handlers[entry](context)
        return context

    def _leave(self, context: TransitionContext) -> None:
        for hook in context.route.triggers_exit:
            hook(context)
        for hook in self.triggers.exit_hooks:
            hook(context)
        context.teardown()

    def current(self) -> Optional[TransitionContext]:
        return self._current

    # ------------------------------------------------------------------
    # Table queries
    # ------------------------------------------------------------------
    @property
    def routes(self) -> Tuple[RouteEntry, ...]:
        return tuple(self._routes)

    def match(self, path: str) -> Tuple[Optional[RouteEntry], Dict[str, Optional[str]]]:
        for entry in self._routes:
            params = entry.match(path)
            if params is not None:
                return entry, params
        return None, {}

    def has_path(self, path: str) -> bool:
        entry, _ = self.match(split_query(path)[0])
        return entry is not None

    def route_named(self, name: str) -> RouteEntry:
        try:
            return self._by_name[name]
        except KeyError:
            raise RouteNotFound(f"No route named '{name}' on router '{self.name}'") from None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def members(self) -> Dict[str, Any]:
        """Return a description of the table and its plugin state."""
        return {
            "name": self.name,
            "initialized": self._initialized,
            "routes": [self._entry_member_info(entry) for entry in self._routes],
            "not_found": self._entry_member_info(self._not_found),
            "plugin_info": self._get_plugin_info(),
        }

    def _entry_member_info(self, entry: RouteEntry) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "name": entry.name,
            "path": entry.path,
            "full_path": entry.full_path,
            "group": entry.group,
            "options": dict(entry.options),
            "plugins": list(entry.plugins),
            "doc": (inspect.getdoc(entry.action) or "") if entry.action else "",
        }
        extra = self._describe_entry_extra(entry, info)
        if extra:
            info.update(extra)
        return info

    def _get_plugin_info(self) -> Dict[str, Any]:
        info_source = getattr(self, "_plugin_info", {}) or {}
        return {
            pname: {
                key: {
                    "config": dict(slot.get("config", {})),
                    "locals": dict(slot.get("locals", {})),
                }
                for key, slot in pdata.items()
            }
            for pname, pdata in info_source.items()
        }

    # ------------------------------------------------------------------
    # Plugin hooks (no-op for BaseRouter)
    # ------------------------------------------------------------------
    def iter_plugins(self) -> List[Any]:
        return []

    def _after_entry_registered(self, entry: RouteEntry) -> None:
        """Hook invoked after a registration is installed."""
        return None

    def _describe_entry_extra(
        self, entry: RouteEntry, base_description: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Hook used by subclasses to inject extra description data."""
        return {}


def _as_hook_list(hooks: Any) -> List[Callable]:
    if hooks is None:
        return []
    if callable(hooks):
        return [hooks]
    hooks = list(hooks)
    for hook in hooks:
        if not callable(hook):
            raise TypeError(f"Trigger hooks must be callables, got {hook!r}")
    return hooks


def _pop_hooks(options: Dict[str, Any], key: str, alias: str) -> List[Callable]:
    hooks = _as_hook_list(options.pop(key, None))
    return hooks + _as_hook_list(options.pop(alias, None))
