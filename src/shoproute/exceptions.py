"""Exception hierarchy for shoproute.

Navigation and rendering never raise under normal operation: denials become a
flag on the transition context and missing routes or layouts become a
``notFound`` render. The exceptions below cover configuration-time mistakes
and the few runtime conditions the builder absorbs on purpose.
"""

from __future__ import annotations

__all__ = [
    "ShopRouteError",
    "RouterAlreadyInitialized",
    "MalformedRegistryEntry",
    "RouteNotFound",
    "PermissionGateMissing",
]


class ShopRouteError(Exception):
    """Base class for every error raised by shoproute."""


class RouterAlreadyInitialized(ShopRouteError):
    """Raised by ``initialize()`` when the router was already initialized."""


class MalformedRegistryEntry(ShopRouteError, ValueError):
    """A package registry item cannot become a route."""

    def __init__(self, package: str, reason: str, item: object = None):
        self.package = package
        self.reason = reason
        self.item = item
        super().__init__(f"Malformed registry entry in package '{package}': {reason}")


class RouteNotFound(ShopRouteError, KeyError):
    """No registration carries the requested route name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "route not found"


class PermissionGateMissing(ShopRouteError):
    """The router a route table is built on has no permission plugin attached."""
