"""Canonical route names for package registry entries."""

from __future__ import annotations

from typing import Any, Mapping, Optional

__all__ = ["registry_route_name"]


def registry_route_name(package_name: Optional[str], entry: Any) -> Optional[str]:
    """Return the route name for ``entry`` contributed by ``package_name``.

    Priority: the entry's explicit ``name``, then ``"<package>/<template>"``,
    then the package name alone. Everything from the first ``:`` onward is
    dropped, explicit names included, since ``:`` introduces a path parameter.

    Returns None (do not register) when the package name is missing or the
    entry is None. An empty entry resolves to the package name.
    """
    if not package_name or entry is None:
        return None
    name = _field(entry, "name")
    template = _field(entry, "template")
    if name:
        route_name = name
    elif template:
        route_name = f"{package_name}/{template}"
    else:
        route_name = package_name
    return route_name.split(":", 1)[0]


def _field(entry: Any, key: str) -> Optional[str]:
    if isinstance(entry, Mapping):
        return entry.get(key)
    return getattr(entry, key, None)
