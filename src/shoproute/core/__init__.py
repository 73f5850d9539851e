"""Core runtime aggregator.

Exposes the building blocks from a single module: the navigation runtime
(``BaseRouter``, ``Router``, ``RouteGroup``), the per-transition types
(``RouteEntry``, ``TransitionContext``), the route name resolver, layout
selection and dispatch, the reactive primitives and the route table builder.

Importing this module performs only imports; it does not register plugins or
instantiate routers.
"""

from .base_router import BaseRouter, Triggers
from .builder import BuildReport, RouteTableBuilder, init_package_routes
from .entries import RouteEntry, TransitionContext
from .group import RouteGroup
from .layout import LayoutDispatcher, find_layout, select_layout
from .naming import registry_route_name
from .reactive import ChangeBus, Computation
from .router import Router

__all__ = [
    "BaseRouter",
    "BuildReport",
    "ChangeBus",
    "Computation",
    "LayoutDispatcher",
    "RouteEntry",
    "RouteGroup",
    "RouteTableBuilder",
    "Router",
    "TransitionContext",
    "Triggers",
    "find_layout",
    "init_package_routes",
    "registry_route_name",
    "select_layout",
]
