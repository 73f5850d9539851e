"""Path pattern helpers.

Patterns use the ``:param`` convention: ``/orders/:_id`` captures one segment
under ``_id``; a trailing ``?`` (``/tag/:slug?``) makes the segment optional.
Everything else is matched literally. Trailing slashes are ignored and the
query string is never part of a match.

Examples::

    compile_path("/orders")            -> matches "/orders", "/orders/"
    compile_path("/orders/:_id")       -> "/orders/42" -> {"_id": "42"}
    compile_path("/product/:handle?")  -> "/product" -> {"handle": None}
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, Optional, Tuple
from urllib.parse import parse_qsl

__all__ = ["compile_path", "join_paths", "match_path", "split_query"]

_PARAM_RE = re.compile(r"^:(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<optional>\?)?$")


@lru_cache(maxsize=512)
def compile_path(pattern: str) -> "re.Pattern[str]":
    """Compile a route pattern into an anchored regular expression."""
    parts = []
    for segment in pattern.strip("/").split("/"):
        if not segment:
            continue
        param = _PARAM_RE.match(segment)
        if param is None:
            parts.append("/" + re.escape(segment))
        elif param.group("optional"):
            parts.append(f"(?:/(?P<{param.group('name')}>[^/]+))?")
        else:
            parts.append(f"/(?P<{param.group('name')}>[^/]+)")
    return re.compile("^" + "".join(parts) + "/?$")


def match_path(pattern: str, path: str) -> Optional[Dict[str, Optional[str]]]:
    """Return captured params when ``path`` matches ``pattern``, else None."""
    found = compile_path(pattern).match(path or "/")
    if found is None:
        return None
    return found.groupdict()


def split_query(path: str) -> Tuple[str, Dict[str, str]]:
    """Split ``/a?x=1`` into ``("/a", {"x": "1"})``."""
    base, _, query = path.partition("?")
    return base or "/", dict(parse_qsl(query, keep_blank_values=True))


def join_paths(prefix: Optional[str], path: str) -> str:
    """Concatenate a group prefix and a route path with a single slash."""
    if not prefix:
        return path if path.startswith("/") else "/" + path
    head = "/" + prefix.strip("/")
    tail = path.strip("/")
    if not tail:
        return head
    return f"{head}/{tail}"
