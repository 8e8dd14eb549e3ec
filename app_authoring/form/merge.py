"""Prefix filtering and default-value merging.

Only schema fields addressed into the record's custom data carry data; their
paths look like "customData.<key>". strip_prefix() keeps those fields and
rewrites the path to "<key>", which is how the stored record addresses them.
merge_defaults() then copies the stored value for each key onto the field.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

from app_authoring.form.models import FieldDefinition

logger = logging.getLogger("app_authoring.form.merge")

CUSTOM_DATA_PREFIX = "customData."


class DefaultPolicy(str, enum.Enum):
    """When a stored value becomes a field default.

    TRUTHY:   only truthy stored values are applied; 0, False and "" are
              ignored. This is the historical behaviour of the authoring form.
    PRESENCE: any stored key is applied, falsy or not.
    """

    TRUTHY = "truthy"
    PRESENCE = "presence"


def strip_prefix(
    fields: Iterable[FieldDefinition],
    prefix: str = CUSTOM_DATA_PREFIX,
) -> list[FieldDefinition]:
    """Keep prefixed fields only, returning copies with the prefix removed.

    Copies are flat: their children are dropped because flattening has
    already placed every descendant in the sequence. The decision is made on
    the path as authored (source_path once rewritten), so applying this to
    its own output yields the same fields and paths again.
    """
    out: list[FieldDefinition] = []
    for f in fields:
        authored = f.source_path if f.source_path is not None else f.path
        if not authored or not authored.startswith(prefix):
            continue
        out.append(replace(
            f,
            path=authored[len(prefix):],
            source_path=authored,
            children=[],
            options=list(f.options),
            attributes=dict(f.attributes),
        ))
    return out


def merge_defaults(
    fields: list[FieldDefinition],
    values: Mapping[str, Any] | None,
    policy: DefaultPolicy = DefaultPolicy.TRUTHY,
) -> list[FieldDefinition]:
    """Assign stored values as field defaults, in place. Returns `fields`."""
    if not values:
        return fields
    for f in fields:
        if f.path not in values:
            continue
        value = values[f.path]
        if policy is DefaultPolicy.TRUTHY and not value:
            logger.debug("Skipping falsy stored value for %r under truthy policy", f.path)
            continue
        f.default_value = value
    return fields
