"""Data model for application authoring.

FieldDefinition  - one node of an application-type schema tree
PageMode         - NEW (create an app) or EDIT (update an app version)
PageContext      - immutable per-session context: mode + record identity
SessionMode      - SEARCH an existing developer or CREATE a new one
SessionState     - all mutable state owned by one authoring session

Field definitions arrive from the data service in wire form:

    {"id": "customData.color", "label": "Color", "type": "dropdownList",
     "options": ["red", {"value": "blue", "label": "Blue"}],
     "fields": [...], "defaultValue": null, "required": true, ...}

Keys other than id / label / type / options / fields / defaultValue are kept
verbatim in FieldDefinition.attributes so the renderer sees what the schema
authored.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from app_authoring.errors import SchemaDepthError

DEFAULT_MAX_DEPTH = 64

_WIRE_KEYS: frozenset[str] = frozenset({
    "id", "label", "type", "options", "fields", "defaultValue",
})


# ---------------------------------------------------------------------------
# Field definitions
# ---------------------------------------------------------------------------


@dataclass
class FieldDefinition:
    """A node in the schema tree.

    path:          dot-qualified key into the record's value map
                   (wire key "id"), e.g. "customData.color".
    options:       selectable entries, each a scalar or a {value, label} dict.
    children:      nested definitions (wire key "fields"), in authored order.
    default_value: filled in by merge_defaults() from the stored record.
    attributes:    every other wire key, passed through untouched.
    source_path:   the authored path, set once strip_prefix() rewrites `path`.
    """

    path: str = ""
    label: str | None = None
    type: str | None = None
    options: list[Any] = field(default_factory=list)
    children: list[FieldDefinition] = field(default_factory=list)
    default_value: Any = None
    attributes: dict[str, Any] = field(default_factory=dict)
    source_path: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldDefinition:
        """Build a single node (children parsed too) from its wire form."""
        return parse_fields([data])[0]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.attributes)
        out["id"] = self.path
        if self.label is not None:
            out["label"] = self.label
        if self.type is not None:
            out["type"] = self.type
        out["options"] = list(self.options)
        out["defaultValue"] = self.default_value
        if self.children:
            out["fields"] = [child.to_dict() for child in self.children]
        return out


def _node_from_wire(data: dict[str, Any]) -> FieldDefinition:
    return FieldDefinition(
        path=data.get("id") or "",
        label=data.get("label"),
        type=data.get("type"),
        options=list(data.get("options") or []),
        default_value=data.get("defaultValue"),
        attributes={k: v for k, v in data.items() if k not in _WIRE_KEYS},
    )


def parse_fields(
    raw: list[dict[str, Any] | None] | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[FieldDefinition]:
    """Parse a wire-form field list into FieldDefinition trees.

    Null entries are skipped at every level. Uses an explicit stack, so a
    hostile schema cannot exhaust the interpreter's recursion limit; nesting
    beyond max_depth raises SchemaDepthError.
    """
    roots: list[FieldDefinition] = []
    if not raw:
        return roots

    # (wire node, list to append the parsed node to, depth)
    stack: list[tuple[dict[str, Any], list[FieldDefinition], int]] = [
        (item, roots, 1) for item in reversed(raw) if item
    ]
    while stack:
        data, siblings, depth = stack.pop()
        if depth > max_depth:
            raise SchemaDepthError(max_depth)
        node = _node_from_wire(data)
        siblings.append(node)
        children = data.get("fields") or []
        stack.extend((child, node.children, depth + 1) for child in reversed(children) if child)
    return roots


# ---------------------------------------------------------------------------
# Page context
# ---------------------------------------------------------------------------


class PageMode(str, enum.Enum):
    NEW = "new"
    EDIT = "edit"


@dataclass(frozen=True)
class PageContext:
    """Immutable for the lifetime of a session.

    NEW:  no existing record; the static form holds {type}.
    EDIT: editing version `version_number` of app `record_id`; the static
          form holds {name, safeName}.
    """

    mode: PageMode
    record_id: str | None = None
    version_number: int | None = None

    def __post_init__(self) -> None:
        if self.mode is PageMode.EDIT and (not self.record_id or self.version_number is None):
            raise ValueError("EDIT context requires record_id and version_number")

    @classmethod
    def new(cls) -> PageContext:
        return cls(PageMode.NEW)

    @classmethod
    def edit(cls, record_id: str, version_number: int) -> PageContext:
        return cls(PageMode.EDIT, record_id=record_id, version_number=int(version_number))

    @property
    def is_new(self) -> bool:
        return self.mode is PageMode.NEW

    @property
    def form_shape(self) -> tuple[str, ...]:
        """Names of the static (non-schema) form fields for this context."""
        return ("type",) if self.is_new else ("name", "safeName")


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------


class SessionMode(enum.Enum):
    """Whether the developer-id input targets an existing or a new developer."""

    SEARCH = "Developer ID : "
    CREATE = "Create new Developer with ID : "

    @property
    def description(self) -> str:
        return self.value


@dataclass
class SessionState:
    """Everything a session mutates, in one place.

    mode / owner_text / suggestions are written only by the
    WorkflowModeController (plus reset on submission failure).
    submitting is written only by the submission flow.
    """

    mode: SessionMode = SessionMode.SEARCH
    owner_text: str = ""
    suggestions: list[str] = field(default_factory=list)
    fields: list[FieldDefinition] = field(default_factory=list)
    static_values: dict[str, Any] = field(default_factory=dict)
    type_items: list[str] = field(default_factory=list)
    submitting: bool = False
    closed: bool = False
    exit_reason: str | None = None
