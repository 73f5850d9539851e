"""Layout selection and reactive render dispatch.

``select_layout`` decides whether one layout record of a shop answers a
``(layout, workflow)`` request; ``find_layout`` applies it over the shop's
stored sequence (first match wins, no specificity ranking).

``LayoutDispatcher`` is the action behind every route. Calling it resolves
the render options, then starts a :class:`Computation` that renders the
matched layout and re-renders each time the shop document or the shop
subscription readiness changes. The computation belongs to the transition
that started it and stops when the router moves to another one.

Merge order for the render data (later wins): the matched record's
``structure``, the caller's options, the ``unauthorized`` override.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from smartseeds import SmartOptions

from .reactive import Computation

__all__ = [
    "DEFAULT_LAYOUT",
    "DEFAULT_WORKFLOW",
    "NOT_FOUND_VIEW",
    "UNAUTHORIZED_VIEW",
    "LayoutDispatcher",
    "find_layout",
    "select_layout",
]

DEFAULT_LAYOUT = "coreLayout"
DEFAULT_WORKFLOW = "coreWorkflow"
NOT_FOUND_VIEW = "notFound"
UNAUTHORIZED_VIEW = "unauthorized"

_LAYOUT_DEFAULTS = {"layout": DEFAULT_LAYOUT, "workflow": DEFAULT_WORKFLOW}

logger = logging.getLogger(__name__)


def select_layout(record: Any, layout: Optional[str] = None, workflow: Optional[str] = None) -> Any:
    """Return ``record`` when it is enabled and matches both keys, else None."""
    current_layout = layout or DEFAULT_LAYOUT
    current_workflow = workflow or DEFAULT_WORKFLOW
    if (
        _get(record, "layout") == current_layout
        and _get(record, "workflow") == current_workflow
        and _get(record, "enabled") is True
    ):
        return record
    return None


def find_layout(
    records: Optional[Iterable[Any]], layout: Optional[str] = None, workflow: Optional[str] = None
) -> Any:
    for record in records or ():
        if select_layout(record, layout, workflow) is not None:
            return record
    return None


class LayoutDispatcher:
    """Render the shop layout requested by a route, reactively."""

    __slots__ = ("router", "store", "renderer", "_computation")

    def __init__(self, router: Any, store: Any, renderer: Any):
        self.router = router
        self.store = store
        self.renderer = renderer
        self._computation: Optional[Computation] = None

    def __call__(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Start rendering for the current transition and return ``options``.

        ``layout`` and ``workflow`` are written back into ``options`` with
        their defaults applied. The render itself happens in the computation.
        """
        if options is None:
            options = {}
        opts = SmartOptions(options, defaults=_LAYOUT_DEFAULTS)
        layout = getattr(opts, "layout", None) or DEFAULT_LAYOUT
        workflow = getattr(opts, "workflow", None) or DEFAULT_WORKFLOW
        options["layout"] = layout
        options["workflow"] = workflow

        override: Dict[str, Any] = {}
        context = self.router.current()
        if context is not None and context.unauthorized:
            override["template"] = UNAUTHORIZED_VIEW

        self.stop()
        topics = [self.store.ready_topic, self.store.shop_topic(self.store.shop_id)]
        computation = Computation(
            lambda _: self._render(layout, workflow, options, override),
            self.store.bus,
            topics,
        )
        self._computation = computation
        if context is not None:
            context.own(computation)
        return options

    def stop(self) -> None:
        if self._computation is not None:
            self._computation.stop()
            self._computation = None

    def _render(
        self,
        layout: str,
        workflow: str,
        options: Mapping[str, Any],
        override: Mapping[str, Any],
    ) -> None:
        if not self.store.shops_ready():
            return
        shop = self.store.shop(self.store.shop_id)
        if shop is None:
            return
        record = find_layout(_get(shop, "layout"), layout, workflow)
        if record is None:
            logger.debug("no enabled layout %s/%s for shop %s", layout, workflow, self.store.shop_id)
            self.renderer.render(NOT_FOUND_VIEW)
            return
        structure = {**(_get(record, "structure") or {}), **options, **override}
        self.renderer.render(layout, structure)


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)
