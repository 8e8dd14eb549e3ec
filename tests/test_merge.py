"""Prefix filtering and default-value merging."""

from __future__ import annotations

from app_authoring.form.merge import DefaultPolicy, merge_defaults, strip_prefix
from app_authoring.form.models import FieldDefinition

# ---------------------------------------------------------------------------
# strip_prefix
# ---------------------------------------------------------------------------


class TestStripPrefix:
    def test_keeps_prefixed_and_rewrites(self):
        fields = [
            FieldDefinition(path="customData.color"),
            FieldDefinition(path="name"),
            FieldDefinition(path="customData.size"),
        ]
        result = strip_prefix(fields)
        assert [f.path for f in result] == ["color", "size"]
        assert [f.source_path for f in result] == ["customData.color", "customData.size"]

    def test_empty_paths_dropped(self):
        assert strip_prefix([FieldDefinition(path=""), FieldDefinition()]) == []

    def test_prefix_must_lead(self):
        """A path containing the prefix elsewhere is not data-bearing."""
        assert strip_prefix([FieldDefinition(path="meta.customData.x")]) == []

    def test_idempotent(self):
        fields = [
            FieldDefinition(path="customData.a"),
            FieldDefinition(path="b"),
            FieldDefinition(path="customData.c"),
        ]
        once = strip_prefix(fields)
        twice = strip_prefix(once)
        assert [f.path for f in twice] == [f.path for f in once] == ["a", "c"]

    def test_originals_untouched(self):
        original = FieldDefinition(path="customData.a", children=[FieldDefinition(path="customData.b")])
        [copy] = strip_prefix([original])
        assert original.path == "customData.a"
        assert len(original.children) == 1
        assert copy.children == []

    def test_custom_prefix(self):
        result = strip_prefix([FieldDefinition(path="data.x"), FieldDefinition(path="customData.y")], prefix="data.")
        assert [f.path for f in result] == ["x"]


# ---------------------------------------------------------------------------
# merge_defaults
# ---------------------------------------------------------------------------


class TestMergeDefaults:
    def _fields(self) -> list[FieldDefinition]:
        return [FieldDefinition(path="color"), FieldDefinition(path="count")]

    def test_truthy_policy_skips_zero(self):
        """Historical behaviour: a stored 0 is not applied as a default."""
        fields = merge_defaults(self._fields(), {"color": "red", "count": 0})
        color, count = fields
        assert color.default_value == "red"
        assert count.default_value is None

    def test_presence_policy_applies_zero(self):
        fields = merge_defaults(self._fields(), {"color": "red", "count": 0}, DefaultPolicy.PRESENCE)
        color, count = fields
        assert color.default_value == "red"
        assert count.default_value == 0

    def test_presence_policy_applies_false_and_empty(self):
        fields = [FieldDefinition(path="flag"), FieldDefinition(path="note")]
        merge_defaults(fields, {"flag": False, "note": ""}, DefaultPolicy.PRESENCE)
        assert fields[0].default_value is False
        assert fields[1].default_value == ""

    def test_absent_key_keeps_schema_default(self):
        fields = [FieldDefinition(path="color", default_value="blue")]
        merge_defaults(fields, {"other": 1})
        assert fields[0].default_value == "blue"

    def test_returns_same_list(self):
        fields = self._fields()
        assert merge_defaults(fields, {"color": "red"}) is fields

    def test_no_values(self):
        fields = self._fields()
        assert merge_defaults(fields, {}) is fields
        assert merge_defaults(fields, None) is fields
        assert all(f.default_value is None for f in fields)

    def test_structured_value_applied(self):
        fields = [FieldDefinition(path="tags")]
        merge_defaults(fields, {"tags": ["a", "b"]})
        assert fields[0].default_value == ["a", "b"]
