"""Option list normalization.

Schemas author options either as plain scalars or as {value, label} pairs.
Renderers only want the selectable values, so every entry is replaced by its
scalar value. The slot count never changes: a pair without a "value" key
becomes None rather than disappearing, since callers may refer to options by
index.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def normalize_option(entry: Any) -> Any:
    if isinstance(entry, Mapping):
        return entry.get("value")
    return entry


def normalize_options(options: list[Any] | None) -> list[Any]:
    """Return the scalar value of every option, preserving order and length.

    >>> normalize_options(["a", {"value": "b", "label": "B"}])
    ['a', 'b']
    """
    if not options:
        return []
    return [normalize_option(entry) for entry in options]
