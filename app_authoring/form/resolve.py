"""Schema resolution: application-type schema + stored record → renderable fields.

resolve_fields() is the pure pipeline:

    flatten_fields  → pre-order list of every node
    strip_prefix    → data-bearing fields only, "customData." removed
    merge_defaults  → stored record values become field defaults
    normalize       → options reduced to their scalar values

SchemaResolutionEngine wraps it with the data-service calls that feed it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app_authoring.errors import LookupFailure, SchemaDepthError
from app_authoring.form.flatten import flatten_fields
from app_authoring.form.merge import CUSTOM_DATA_PREFIX, DefaultPolicy, merge_defaults, strip_prefix
from app_authoring.form.models import DEFAULT_MAX_DEPTH, FieldDefinition, parse_fields
from app_authoring.form.options import normalize_options
from app_authoring.form.service import MarketplaceService
from app_authoring.form.settings import FormSettings

logger = logging.getLogger("app_authoring.form.resolve")


def resolve_fields(
    schema_roots: list[FieldDefinition] | None,
    record_values: Mapping[str, Any] | None,
    *,
    policy: DefaultPolicy = DefaultPolicy.TRUTHY,
    prefix: str = CUSTOM_DATA_PREFIX,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[FieldDefinition]:
    """Return the ordered, render-ready field list.

    Either input being None means the session is still missing context (no
    type chosen, record not loaded yet); that yields [] rather than an error.
    The schema tree passed in is left untouched.
    """
    if schema_roots is None or record_values is None:
        return []
    fields = strip_prefix(flatten_fields(schema_roots, max_depth=max_depth), prefix)
    merge_defaults(fields, record_values, policy)
    for f in fields:
        f.options = normalize_options(f.options)
    return fields


class SchemaResolutionEngine:
    """Fetches schemas and records from the data service and resolves them.

    Read failures other than the record fetch are logged and degrade to an
    empty result. The record-path methods raise, since an edit session
    cannot continue without its record.
    """

    def __init__(self, service: MarketplaceService, settings: FormSettings | None = None) -> None:
        self._service = service
        self._settings = settings or FormSettings()

    def resolve(
        self,
        schema_roots: list[FieldDefinition] | None,
        record_values: Mapping[str, Any] | None,
    ) -> list[FieldDefinition]:
        return resolve_fields(
            schema_roots,
            record_values,
            policy=self._settings.default_policy,
            prefix=self._settings.field_prefix,
            max_depth=self._settings.max_schema_depth,
        )

    async def load_type_items(self) -> list[str]:
        """Ids of the enabled application types, for the type selector."""
        try:
            app_types = await self._service.list_app_types(1, self._settings.type_page_size, True)
        except LookupFailure as e:
            logger.error("Can't get application types: %s", e)
            return []
        return [t["id"] for t in app_types or [] if t and t.get("id")]

    async def fetch_schema(self, type_id: str) -> list[FieldDefinition]:
        """Raises LookupFailure or SchemaDepthError."""
        schema = await self._service.get_app_type(type_id)
        return parse_fields((schema or {}).get("fields"), max_depth=self._settings.max_schema_depth)

    async def resolve_for_type(self, type_id: str) -> list[FieldDefinition]:
        """Fields for a new app of `type_id`; [] when the schema can't be loaded."""
        try:
            roots = await self.fetch_schema(type_id)
        except (LookupFailure, SchemaDepthError) as e:
            logger.error("Can't get fields for application type %r: %s", type_id, e)
            return []
        return self.resolve(roots, {})

    async def load_record(self, record_id: str, version: int) -> dict[str, Any] | None:
        """The stored app version, or None when the service has no such record."""
        return await self._service.get_app_version(record_id, version)

    async def resolve_for_record(self, record: dict[str, Any]) -> list[FieldDefinition]:
        """Fields of the record's type with the record's custom data as defaults.

        Raises LookupFailure when the record names no type or the type schema
        can't be loaded, SchemaDepthError when the schema nests too deep.
        """
        type_id = record.get("type")
        if not type_id:
            raise LookupFailure("get_app_type", "record has no application type")
        roots = await self.fetch_schema(type_id)
        return self.resolve(roots, record.get("customData") or {})
