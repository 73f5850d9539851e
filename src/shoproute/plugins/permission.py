"""Permission gate plugin (source of truth).

Every transition of a router with this plugin attached goes through
:meth:`PermissionPlugin.check` before anything else runs: the plugin has the
lowest ``plugin_order`` so it is the outermost handler layer, ahead of the
global enter triggers, the route's own enter triggers and the action. It is
``mandatory``: per-route enable flags do not bypass it.

Gate contract
-------------
- Ask ``authority.has_permission(route_name, principal_id)``.
- Granted: clear a stale ``unauthorized`` flag and pass the context on.
- Denied, and the path matches a route in the router table: set
  ``context.unauthorized = True``. Navigation continues; the layout
  dispatcher turns the flag into the ``"unauthorized"`` view slot.
- Denied, and the path matches nothing: leave the flag absent. The not-found
  render handles it.
- The authority raising (or missing) counts as denied when ``fail_closed``
  (default) and as granted otherwise; the failure is logged.

Configuration
-------------
``router.plug("permission", authority=..., principal=..., fail_closed=True)``

- ``authority``: object exposing ``has_permission(route_name, principal_id)``.
- ``principal``: callable returning the current principal id, or the id.
- ``fail_closed``: stance on authority failures.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from shoproute.core.entries import RouteEntry, TransitionContext
from shoproute.core.router import Router
from shoproute.plugins._base_plugin import BasePlugin

__all__ = ["PermissionPlugin"]

logger = logging.getLogger(__name__)


class PermissionPlugin(BasePlugin):
    """Flag transitions the current principal may not perform."""

    plugin_code = "permission"
    plugin_description = "Marks unauthorized transitions without blocking navigation"
    plugin_order = 0
    mandatory = True

    __slots__ = ()

    def configure(
        self,
        authority: Any = None,
        principal: Any = None,
        fail_closed: bool = True,
    ):
        """Configure the authority, the principal provider and the failure stance."""
        pass  # Storage is handled by the wrapper

    def check(self, router: Any, context: TransitionContext) -> TransitionContext:
        if self.is_allowed(context.route_name):
            if context.unauthorized is True:
                context.unauthorized = None
            return context
        if router.has_path(context.path):
            context.unauthorized = True
        return context

    def is_allowed(self, route_name: Optional[str]) -> bool:
        cfg = self.configuration()
        fail_closed = cfg.get("fail_closed", True)
        authority = cfg.get("authority")
        if authority is None:
            logger.warning("No authority configured; route '%s' %s", route_name, _stance(fail_closed))
            return not fail_closed
        try:
            return bool(authority.has_permission(route_name, self.principal_id(cfg)))
        except Exception:
            logger.warning(
                "Authority failed for route '%s'; %s", route_name, _stance(fail_closed), exc_info=True
            )
            return not fail_closed

    def principal_id(self, cfg: Optional[Dict[str, Any]] = None) -> Any:
        principal = (cfg if cfg is not None else self.configuration()).get("principal")
        return principal() if callable(principal) else principal

    def wrap_handler(self, router: Any, entry: RouteEntry, call_next: Callable) -> Callable:
        def gated(context: TransitionContext):
            self.check(router, context)
            return call_next(context)

        return gated


def _stance(fail_closed: bool) -> str:
    return "treated as denied" if fail_closed else "treated as granted"


Router.register_plugin(PermissionPlugin)
