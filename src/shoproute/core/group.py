"""Route groups: a name and a path prefix shared by several routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from .entries import RouteEntry
from .paths import join_paths

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .base_router import BaseRouter

__all__ = ["RouteGroup"]


class RouteGroup:
    """Registers routes on a router under a common prefix.

    Nested groups concatenate prefixes; the innermost name wins.
    """

    __slots__ = ("router", "name", "prefix")

    def __init__(self, router: "BaseRouter", name: Optional[str] = None, prefix: Optional[str] = None):
        self.router = router
        self.name = name
        self.prefix = join_paths(prefix, "") if prefix and prefix.strip("/") else ""

    def route(self, path: str, **options: Any) -> RouteEntry:
        return self.router.add_route(path, group=self, **options)

    def group(self, name: Optional[str] = None, prefix: Optional[str] = None) -> "RouteGroup":
        return RouteGroup(
            self.router,
            name=name or self.name,
            prefix=join_paths(self.prefix, prefix or "") if self.prefix else prefix,
        )

    def __repr__(self) -> str:
        return f"RouteGroup(name={self.name!r}, prefix={self.prefix!r})"
