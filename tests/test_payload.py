"""Create vs. update payload assembly."""

from __future__ import annotations

import pytest

from app_authoring.form.models import PageContext, PageMode
from app_authoring.form.payload import assemble_payload


class TestAssemblePayload:
    def test_new_context(self):
        payload = assemble_payload(PageContext.new(), {"type": "game"}, {"name": "X", "foo": 1})
        assert payload == {
            "type": "game",
            "name": "X",
            "autoApprove": True,
            "customData": {"name": "X", "foo": 1},
        }

    def test_edit_context(self):
        payload = assemble_payload(PageContext.edit("app-1", 2), {"name": "X", "safeName": "x"}, {"foo": 1})
        assert payload == {
            "name": "X",
            "approvalRequired": False,
            "customData": {"foo": 1, "safeName": "x"},
        }

    def test_edit_safe_name_wins_over_field_value(self):
        payload = assemble_payload(
            PageContext.edit("app-1", 2),
            {"name": "X", "safeName": "x"},
            {"safeName": "stale", "foo": 1},
        )
        assert payload["customData"]["safeName"] == "x"

    def test_inputs_not_mutated(self):
        static = {"type": "game"}
        dynamic = {"name": "X"}
        payload = assemble_payload(PageContext.new(), static, dynamic)
        payload["customData"]["extra"] = True
        assert dynamic == {"name": "X"}
        assert static == {"type": "game"}

    def test_no_validation(self):
        payload = assemble_payload(PageContext.new(), None, None)
        assert payload == {"type": None, "name": None, "autoApprove": True, "customData": {}}


class TestPageContext:
    def test_form_shapes(self):
        assert PageContext.new().form_shape == ("type",)
        assert PageContext.edit("app-1", 0).form_shape == ("name", "safeName")

    def test_edit_requires_identity(self):
        with pytest.raises(ValueError):
            PageContext(PageMode.EDIT)

    def test_immutable(self):
        ctx = PageContext.new()
        with pytest.raises(AttributeError):
            ctx.record_id = "x"  # type: ignore[misc]
