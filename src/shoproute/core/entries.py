"""Route registration and per-transition state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

from .paths import join_paths, match_path

__all__ = ["RouteEntry", "TransitionContext"]


@dataclass(eq=False)
class RouteEntry:
    """A route installed in a router table.

    Equality is identity: two entries built from identical registry data are
    still two entries.
    """

    name: Optional[str]
    path: str
    router: Any
    prefix: str = ""
    group: Optional[str] = None
    action: Optional[Callable] = None
    options: Dict[str, Any] = field(default_factory=dict)
    triggers_enter: List[Callable] = field(default_factory=list)
    triggers_exit: List[Callable] = field(default_factory=list)
    plugins: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def full_path(self) -> str:
        return join_paths(self.prefix, self.path)

    def match(self, path: str) -> Optional[Dict[str, Optional[str]]]:
        return match_path(self.full_path, path)


@dataclass(eq=False)
class TransitionContext:
    """State of one navigation.

    ``unauthorized`` is ``None`` until the permission layer flags the
    transition. Computations started while rendering the transition are
    owned here and stopped by ``teardown()`` once the router moves on.
    """

    path: str
    route: RouteEntry
    params: Dict[str, Optional[str]] = field(default_factory=dict)
    query: Dict[str, str] = field(default_factory=dict)
    unauthorized: Optional[bool] = None
    _computations: List[Any] = field(default_factory=list, repr=False)

    @property
    def route_name(self) -> Optional[str]:
        return self.route.name

    def path_with_query(self) -> str:
        if not self.query:
            return self.path
        return f"{self.path}?{urlencode(self.query)}"

    def own(self, computation: Any) -> Any:
        self._computations.append(computation)
        return computation

    def teardown(self) -> None:
        computations, self._computations = self._computations, []
        for computation in computations:
            computation.stop()
