"""Pre-order flattening of a field-definition tree."""

from __future__ import annotations

from collections.abc import Iterable

from app_authoring.errors import SchemaDepthError
from app_authoring.form.models import DEFAULT_MAX_DEPTH, FieldDefinition


def flatten_fields(
    roots: Iterable[FieldDefinition | None] | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[FieldDefinition]:
    """Flatten a field tree into one ordered list.

    Each node is emitted before any of its descendants, siblings keep their
    authored order, and children are spliced into the result individually,
    never as a nested group. None nodes are skipped. The returned nodes are
    the originals, not copies.

    Raises SchemaDepthError when a branch is deeper than max_depth.
    """
    result: list[FieldDefinition] = []
    if not roots:
        return result

    stack: list[tuple[FieldDefinition, int]] = [
        (node, 1) for node in reversed(list(roots)) if node is not None
    ]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            raise SchemaDepthError(max_depth)
        result.append(node)
        stack.extend(
            (child, depth + 1) for child in reversed(node.children) if child is not None
        )
    return result
