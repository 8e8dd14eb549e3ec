"""Outbound request bodies for creating an app or updating an app version."""

from __future__ import annotations

from typing import Any

from app_authoring.form.models import PageContext


def assemble_payload(
    context: PageContext,
    static_values: dict[str, Any] | None,
    field_values: dict[str, Any] | None,
) -> dict[str, Any]:
    """Build the create or update body for `context`.

    NEW:  {type, name, autoApprove: True, customData: field_values}
    EDIT: {name, approvalRequired: False, customData: field_values + safeName}

    No validation; the caller is responsible for having gathered the static
    values the context requires.
    """
    static_values = static_values or {}
    field_values = field_values or {}
    if context.is_new:
        return {
            "type": static_values.get("type"),
            "name": field_values.get("name"),
            "autoApprove": True,
            "customData": dict(field_values),
        }
    return {
        "name": static_values.get("name"),
        "approvalRequired": False,
        "customData": {**field_values, "safeName": static_values.get("safeName")},
    }
