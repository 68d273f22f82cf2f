"""Ordered-priority accessors for inconsistently keyed upstream payloads.

Upstream services spell the same field several ways (``year`` vs
``copticYear``, ``title`` vs ``name`` vs ``heading``). Every normalizer in
the package declares an explicit alias tuple per field and reads it through
these helpers, so the priority order is data rather than a chain of
optional lookups.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

T = TypeVar("T")

_WHITESPACE_RE = re.compile(r"\s+")


def as_text(value: Any) -> str | None:
    """Coerce a scalar to text. Strings pass through, numbers are formatted."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value)) if value.is_integer() else str(value)
    return None


def as_integer(value: Any) -> int | None:
    """Coerce a number or numeric string to an int; ``None`` when not finite and integral."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return None


def collapse_whitespace(value: str | None) -> str:
    if not isinstance(value, str):
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def first_present(
    node: Any,
    aliases: Sequence[str],
    coerce: Callable[[Any], T | None] = as_text,  # type: ignore[assignment]
) -> T | None:
    """Return the first alias whose value coerces to something non-empty.

    Empty strings count as absent, matching how upstream omits fields.
    """
    if not isinstance(node, Mapping):
        return None
    for alias in aliases:
        if alias not in node:
            continue
        value = coerce(node[alias])
        if value is None or value == "":
            continue
        return value
    return None


def first_defined(node: Any, aliases: Sequence[str]) -> Any:
    """Raw value of the first alias that is set, without coercion.

    Unlike ``first_present`` a value that later fails to coerce does not fall
    through to the next alias.
    """
    if not isinstance(node, Mapping):
        return None
    for alias in aliases:
        value = node.get(alias)
        if value is not None:
            return value
    return None


def resolve_segment(payload: Any, paths: Sequence[Sequence[str]]) -> Any:
    """Return the first mapping found at any of ``paths``, else the payload itself.

    Each path is a tuple of keys walked from the payload root, e.g.
    ``("data", "calendar", "coptic")``. Returns ``None`` for non-mapping payloads.
    """
    if not isinstance(payload, Mapping):
        return None
    for path in paths:
        current: Any = payload
        for key in path:
            if not isinstance(current, Mapping):
                current = None
                break
            current = current.get(key)
        if isinstance(current, Mapping) and current:
            return current
    return payload


def ensure_sequence(value: Any, nested: Sequence[str] = ("entries", "items", "readings")) -> list[Any]:
    """Normalise the three shapes a list-valued field arrives in.

    A list is returned as-is; an object holding a list under one of
    ``nested`` yields that list; any other object yields its values.
    """
    if not value:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        for key in nested:
            inner = value.get(key)
            if isinstance(inner, list):
                return inner
        return list(value.values())
    return []
