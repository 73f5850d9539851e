"""Transition logging plugin (source of truth).

Each transition of the router is bracketed by two messages:

- ``before``: ``"<route> start <path>"``;
- ``after``: ``"<route> end (<ms> ms)"`` with the elapsed milliseconds
  formatted ``.2f`` and a trailing ``" [unauthorized]"`` when the permission
  layer flagged the transition.

``<route>`` is the route name, or the full path for unnamed routes.

Sinks, checked in order:

1. ``print`` true: ``print(message)``;
2. ``log`` true: ``logger.info(message)``, falling back to ``print`` when the
   logger has no handlers, so messages are not dropped silently;
3. otherwise nothing.

Options (router level or per route with ``_target``): ``enabled``,
``before``, ``after``, ``log``, ``print``; also as ``flags``, e.g.
``router.plug("logging", flags="before:off,print:on")`` or
``router.logging.configure(_target="orders/list", after=False)``.

The logger defaults to ``logging.getLogger("shoproute")``. A transition
that raises propagates and produces no ``after`` message.

The plugin registers itself as ``"logging"`` on import.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from shoproute.core.entries import RouteEntry, TransitionContext
from shoproute.core.router import Router, route_key
from shoproute.plugins._base_plugin import BasePlugin

_DEFAULTS = {"enabled": True, "before": True, "after": True, "log": True, "print": False}


class LoggingPlugin(BasePlugin):
    """Logs every transition with timing."""

    plugin_code = "logging"
    plugin_description = "Logs route transitions with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("shoproute")
        super().__init__(router, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - option name mirrors the sink
    ):
        """Configure logging plugin options."""
        pass  # Storage is handled by the wrapper

    def settings(self, key: str) -> Dict[str, bool]:
        """Effective boolean options for one route."""
        merged = {**_DEFAULTS, **self.configuration(key)}
        return {
            option: default if merged.get(option) is None else bool(merged[option])
            for option, default in _DEFAULTS.items()
        }

    def _sink(self, settings: Dict[str, bool]) -> Optional[Callable[[str], None]]:
        if settings["print"]:
            return print
        if not settings["log"]:
            return None
        has_handlers = getattr(self._logger, "hasHandlers", None)
        if callable(has_handlers) and has_handlers():
            return self._logger.info
        return print

    def wrap_handler(self, router, entry: RouteEntry, call_next: Callable):
        key = route_key(entry)

        def logged(context: TransitionContext):
            settings = self.settings(key)
            sink = self._sink(settings) if settings["enabled"] else None
            if sink is None:
                return call_next(context)
            if settings["before"]:
                sink(f"{key} start {context.path}")
            started = time.perf_counter()
            result = call_next(context)
            if settings["after"]:
                elapsed = (time.perf_counter() - started) * 1000
                flag = " [unauthorized]" if context.unauthorized else ""
                sink(f"{key} end ({elapsed:.2f} ms){flag}")
            return result

        return logged


Router.register_plugin(LoggingPlugin)
