"""Tests for structural validation (validate, validate_value, decode_candidate).

Covers each violation kind, traversal order, schema definition errors,
and determinism over generated schemas and outputs.
"""

from __future__ import annotations

import json
import time

import pytest
from hypothesis import given, settings

from mend.exceptions import SchemaDefinitionError
from mend.models.repair import ViolationKind
from mend.models.schema import SchemaKind, SchemaNode
from mend.validation import check_schema, decode_candidate, validate, validate_value
from tests.strategies import raw_outputs, schemas


def _summary(violations):
    return [(v.render_path(), v.kind) for v in violations]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class TestDecodeCandidate:
    def test_plain_json(self):
        c = decode_candidate('{"a": 1}')
        assert c.ok
        assert c.value == {"a": 1}
        assert c.raw == '{"a": 1}'

    def test_markdown_fence_is_tolerated(self):
        raw = '```json\n{"a": 1}\n```'
        c = decode_candidate(raw)
        assert c.ok
        assert c.value == {"a": 1}
        assert c.raw == raw

    def test_truncated_json_fails(self):
        c = decode_candidate('{"name": "Alice", "ag')
        assert not c.ok
        assert c.error

    def test_nan_is_rejected(self):
        assert not decode_candidate('{"a": NaN}').ok

    def test_json_null_decodes(self):
        c = decode_candidate("null")
        assert c.ok
        assert c.value is None

    def test_untagged_fence_is_tolerated(self):
        c = decode_candidate('```\n[1, 2]\n```')
        assert c.ok
        assert c.value == [1, 2]

    def test_single_line_fence_is_tolerated(self):
        c = decode_candidate('```{"a": 1}```')
        assert c.ok
        assert c.value == {"a": 1}

    @pytest.mark.parametrize("raw", ["```" + " " * 50_000, "```" + " " * 50_000 + "x"])
    def test_unclosed_fence_with_long_padding_fails_fast(self, raw):
        started = time.monotonic()
        c = decode_candidate(raw)
        elapsed = time.monotonic() - started

        assert not c.ok
        assert elapsed < 1.0

    def test_deeply_nested_input_fails_without_raising(self):
        c = decode_candidate("[" * 100_000)
        assert not c.ok
        assert c.error


# ---------------------------------------------------------------------------
# Violation kinds
# ---------------------------------------------------------------------------


class TestViolationKinds:
    def test_valid_output_has_no_violations(self, person_schema):
        assert validate(person_schema, '{"name": "Alice", "age": 30}') == []

    def test_missing_required_field(self, person_schema):
        violations = validate(person_schema, '{"name": "Alice"}')
        assert _summary(violations) == [("$.age", ViolationKind.MISSING_FIELD)]
        assert violations[0].path == ("age",)
        assert "age" in violations[0].message

    def test_optional_field_may_be_absent(self, order_schema):
        ok = {"id": "o1", "status": "open", "items": []}
        assert validate_value(order_schema, ok) == []

    def test_wrong_primitive_type(self, person_schema):
        violations = validate(person_schema, '{"name": "Alice", "age": "thirty"}')
        assert _summary(violations) == [("$.age", ViolationKind.WRONG_TYPE)]
        assert violations[0].message == "expected number, got string"

    def test_boolean_is_not_a_number(self, person_schema):
        violations = validate_value(person_schema, {"name": "A", "age": True})
        assert _summary(violations) == [("$.age", ViolationKind.WRONG_TYPE)]

    def test_null_is_wrong_type(self, person_schema):
        violations = validate_value(person_schema, {"name": None, "age": 1})
        assert violations[0].message == "expected string, got null"

    def test_root_type_mismatch(self, person_schema):
        violations = validate(person_schema, "[1, 2]")
        assert _summary(violations) == [("$", ViolationKind.WRONG_TYPE)]

    def test_unparseable_output_is_malformed(self, person_schema):
        violations = validate(person_schema, "Sure! Here is the data: {name: Alice}")
        assert len(violations) == 1
        assert violations[0].kind is ViolationKind.MALFORMED_STRUCTURE
        assert violations[0].path == ()

    def test_too_deeply_nested_output_is_malformed(self, person_schema):
        violations = validate(person_schema, "[" * 100_000)
        assert len(violations) == 1
        assert violations[0].kind is ViolationKind.MALFORMED_STRUCTURE
        assert violations[0].path == ()

    def test_enum_membership(self, order_schema):
        bad = {"id": "o1", "status": "lost", "items": []}
        violations = validate_value(order_schema, bad)
        assert _summary(violations) == [("$.status", ViolationKind.WRONG_TYPE)]
        assert '"open"' in violations[0].message

    def test_enum_does_not_confuse_true_and_one(self):
        schema = SchemaNode.enum([1, 2])
        assert validate_value(schema, 1) == []
        assert len(validate_value(schema, True)) == 1

    def test_additional_field_rejected_when_closed(self, order_schema):
        bad = {"id": "o1", "status": "open", "items": [], "note": "x"}
        violations = validate_value(order_schema, bad)
        assert _summary(violations) == [
            ("$.note", ViolationKind.UNEXPECTED_ADDITIONAL_FIELD)
        ]

    def test_additional_field_allowed_when_open(self, person_schema):
        assert validate_value(person_schema, {"name": "A", "age": 1, "x": 2}) == []

    def test_array_items_validated_with_index(self, order_schema):
        bad = {
            "id": "o1",
            "status": "open",
            "items": [{"sku": "a", "qty": 1}, {"sku": 5}],
        }
        assert _summary(validate_value(order_schema, bad)) == [
            ("$.items[1].sku", ViolationKind.WRONG_TYPE),
            ("$.items[1].qty", ViolationKind.MISSING_FIELD),
        ]

    def test_does_not_check_value_ranges(self, person_schema):
        assert validate_value(person_schema, {"name": "", "age": -400}) == []


# ---------------------------------------------------------------------------
# Ordering and determinism
# ---------------------------------------------------------------------------


class TestOrdering:
    def test_order_follows_schema_not_output(self, order_schema):
        """Reordering the output's keys does not reorder violations."""
        a = '{"note": 1, "gift": "yes", "items": {}, "id": 7, "extra": 2}'
        b = '{"extra": 2, "id": 7, "items": {}, "gift": "yes", "note": 1}'
        assert validate(order_schema, a) == validate(order_schema, b)
        assert _summary(validate(order_schema, a)) == [
            ("$.id", ViolationKind.WRONG_TYPE),
            ("$.status", ViolationKind.MISSING_FIELD),
            ("$.items", ViolationKind.WRONG_TYPE),
            ("$.gift", ViolationKind.WRONG_TYPE),
            ("$.extra", ViolationKind.UNEXPECTED_ADDITIONAL_FIELD),
            ("$.note", ViolationKind.UNEXPECTED_ADDITIONAL_FIELD),
        ]

    def test_depth_first(self):
        schema = SchemaNode.object(
            {
                "a": SchemaNode.object({"x": SchemaNode.string()}, required=["x"]),
                "b": SchemaNode.string(),
            },
            required=["a", "b"],
        )
        assert _summary(validate_value(schema, {"a": {}})) == [
            ("$.a.x", ViolationKind.MISSING_FIELD),
            ("$.b", ViolationKind.MISSING_FIELD),
        ]

    @settings(max_examples=150)
    @given(schema=schemas, output=raw_outputs)
    def test_validate_is_deterministic(self, schema, output):
        assert validate(schema, output) == validate(schema, output)

    @settings(max_examples=100)
    @given(schema=schemas, output=raw_outputs)
    def test_violation_paths_point_into_schema(self, schema, output):
        """Every violation path starts at the root and uses str/int steps."""
        for v in validate(schema, output):
            assert all(isinstance(step, (str, int)) for step in v.path)
            assert v.render_path().startswith("$")


# ---------------------------------------------------------------------------
# Schema definition errors
# ---------------------------------------------------------------------------


class TestSchemaDefinitionErrors:
    @pytest.mark.parametrize(
        "schema, match",
        [
            (SchemaNode.object({"a": SchemaNode.string()}, required=["b"]), "not declared"),
            (SchemaNode(kind=SchemaKind.ARRAY), "requires an items shape"),
            (SchemaNode.enum([]), "at least one value"),
            (
                SchemaNode(kind=SchemaKind.STRING, properties={"a": SchemaNode.string()}),
                "cannot declare properties",
            ),
            (
                SchemaNode(kind=SchemaKind.NUMBER, items=SchemaNode.string()),
                "cannot declare items",
            ),
            (
                SchemaNode.array(SchemaNode.object({}, required=["z"])),
                r"\$\[\]",
            ),
        ],
    )
    def test_malformed_schema_raises(self, schema, match):
        with pytest.raises(SchemaDefinitionError, match=match):
            check_schema(schema)
        with pytest.raises(SchemaDefinitionError):
            validate(schema, json.dumps({}))

    def test_non_schema_rejected(self):
        with pytest.raises(SchemaDefinitionError):
            validate({"type": "object"}, "{}")  # type: ignore[arg-type]

    @given(schema=schemas)
    def test_generated_schemas_are_well_formed(self, schema):
        check_schema(schema)
