"""Structural validation of model output against a SchemaNode.

Provides decode_candidate() for the serialization-level parse,
validate_value() for checking an already-decoded value, and validate()
which does both for raw text.

Only shape is checked: required fields, primitive types, array/object
structure, enum membership and undeclared fields. Value ranges and
business rules are the caller's concern.

Violations come out in a fixed order: depth-first, following the
schema's declaration order rather than the output's key order, with
undeclared fields reported after declared ones and sorted by name.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from mend.exceptions import SchemaDefinitionError
from mend.models.repair import PathStep, ValidationViolation, ViolationKind
from mend.models.schema import SchemaKind, SchemaNode

logger = logging.getLogger(__name__)

_FENCE = "```"

# Longest rendering of an offending value inside a violation message.
_MAX_VALUE_PREVIEW = 60


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Candidate:
    """Result of decoding raw model text.

    Attributes:
        raw: The text exactly as received.
        value: Decoded value (meaningless when ``error`` is set).
        error: Decoder message if the text is not well-formed, else None.
    """

    raw: str
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def strip_markdown_fence(raw: str) -> str:
    """Strip a single surrounding ```json fence, if present."""
    trimmed = raw.strip()
    if len(trimmed) < 2 * len(_FENCE) or not (
        trimmed.startswith(_FENCE) and trimmed.endswith(_FENCE)
    ):
        return trimmed
    body = trimmed[len(_FENCE):-len(_FENCE)]
    # The rest of the opening line is a language tag such as "json".
    first_line, newline, rest = body.partition("\n")
    if newline and (not first_line.strip() or first_line.strip().isalnum()):
        body = rest
    return body.strip()


def decode_candidate(raw: str) -> Candidate:
    """Parse raw model text as strict JSON.

    A single markdown code fence around the payload is tolerated.
    NaN and Infinity are rejected.
    """
    text = strip_markdown_fence(raw)
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        return Candidate(raw=raw, error=str(exc) or type(exc).__name__)
    return Candidate(raw=raw, value=value)


# ---------------------------------------------------------------------------
# Schema checks
# ---------------------------------------------------------------------------


def check_schema(schema: SchemaNode, _path: str = "$") -> None:
    """Verify a schema is well-formed.

    Raises:
        SchemaDefinitionError: On the first problem found.
    """
    if not isinstance(schema, SchemaNode):
        raise SchemaDefinitionError(_path, f"expected SchemaNode, got {type(schema).__name__}")

    kind = schema.kind
    if kind is not SchemaKind.OBJECT:
        if schema.properties:
            raise SchemaDefinitionError(_path, f"'{kind.value}' node cannot declare properties")
        if schema.required:
            raise SchemaDefinitionError(_path, f"'{kind.value}' node cannot declare required fields")
    if kind is not SchemaKind.ARRAY and schema.items is not None:
        raise SchemaDefinitionError(_path, f"'{kind.value}' node cannot declare items")
    if kind is not SchemaKind.ENUM and schema.enum_values is not None:
        raise SchemaDefinitionError(_path, f"'{kind.value}' node cannot declare enum values")

    if kind is SchemaKind.OBJECT:
        props = schema.properties or {}
        for name in props:
            if not isinstance(name, str):
                raise SchemaDefinitionError(_path, f"property name {name!r} is not a string")
        undeclared = sorted(schema.required - set(props))
        if undeclared:
            raise SchemaDefinitionError(
                _path, f"required field(s) not declared as properties: {', '.join(undeclared)}"
            )
        for name, child in props.items():
            check_schema(child, f"{_path}.{name}")
    elif kind is SchemaKind.ARRAY:
        if schema.items is None:
            raise SchemaDefinitionError(_path, "array node requires an items shape")
        check_schema(schema.items, f"{_path}[]")
    elif kind is SchemaKind.ENUM:
        if not schema.enum_values:
            raise SchemaDefinitionError(_path, "enum node requires at least one value")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def json_type_name(value: Any) -> str:
    """Name a decoded value by its JSON type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _preview(value: Any) -> str:
    try:
        text = json.dumps(value, sort_keys=True)
    except (TypeError, ValueError, RecursionError):
        text = repr(value)
    if len(text) > _MAX_VALUE_PREVIEW:
        text = text[: _MAX_VALUE_PREVIEW - 3] + "..."
    return text


def _enum_match(value: Any, allowed: tuple[Any, ...]) -> bool:
    # True == 1 in Python, so compare JSON types as well as values.
    value_type = json_type_name(value)
    return any(json_type_name(v) == value_type and v == value for v in allowed)


def _walk(
    node: SchemaNode,
    value: Any,
    path: tuple[PathStep, ...],
    out: list[ValidationViolation],
) -> None:
    kind = node.kind
    actual = json_type_name(value)

    if kind is SchemaKind.ENUM:
        allowed = node.enum_values or ()
        if not _enum_match(value, allowed):
            choices = ", ".join(_preview(v) for v in allowed)
            out.append(ValidationViolation(
                path, ViolationKind.WRONG_TYPE,
                f"expected one of [{choices}], got {_preview(value)}",
            ))
        return

    if actual != kind.value:
        out.append(ValidationViolation(
            path, ViolationKind.WRONG_TYPE,
            f"expected {kind.value}, got {actual}",
        ))
        return

    if kind is SchemaKind.OBJECT:
        props = node.properties or {}
        for name, child in props.items():
            if name not in value:
                if name in node.required:
                    out.append(ValidationViolation(
                        path + (name,), ViolationKind.MISSING_FIELD,
                        f"required field '{name}' is missing",
                    ))
                continue
            _walk(child, value[name], path + (name,), out)
        if not node.additional_properties:
            for name in sorted(k for k in value if k not in props):
                out.append(ValidationViolation(
                    path + (name,), ViolationKind.UNEXPECTED_ADDITIONAL_FIELD,
                    f"field '{name}' is not declared in the schema",
                ))
    elif kind is SchemaKind.ARRAY:
        for index, item in enumerate(value):
            _walk(node.items, item, path + (index,), out)


def validate_value(schema: SchemaNode, value: Any) -> list[ValidationViolation]:
    """Validate an already-decoded value against a schema.

    Returns:
        Violations in traversal order; empty when the value conforms.

    Raises:
        SchemaDefinitionError: If the schema itself is malformed.
    """
    check_schema(schema)
    out: list[ValidationViolation] = []
    _walk(schema, value, (), out)
    return out


def validate(schema: SchemaNode, output: str) -> list[ValidationViolation]:
    """Validate raw model output against a schema.

    Text that is not well-formed JSON yields a single
    ``malformed_structure`` violation at the root.

    Raises:
        SchemaDefinitionError: If the schema itself is malformed.
    """
    check_schema(schema)
    candidate = decode_candidate(output)
    if not candidate.ok:
        return [ValidationViolation(
            (), ViolationKind.MALFORMED_STRUCTURE,
            f"output is not well-formed JSON: {candidate.error}",
        )]
    out: list[ValidationViolation] = []
    _walk(schema, candidate.value, (), out)
    if out:
        logger.debug("Validation found %d violation(s)", len(out))
    return out
