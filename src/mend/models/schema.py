"""Declarative structural schema used by the validator and prompt builder.

SchemaNode is the caller-owned description of what a model's structured
output must look like. It is frozen and its child mappings are read-only,
so a schema cannot change while a repair session is reading it.
"""

from __future__ import annotations

import enum
import json
import types
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from mend.exceptions import SchemaDefinitionError


class SchemaKind(str, enum.Enum):
    """Structural kinds a SchemaNode can describe."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"


# JSON-schema "type" names accepted by from_dict() that map onto a kind.
_TYPE_NAMES: dict[str, SchemaKind] = {
    "object": SchemaKind.OBJECT,
    "array": SchemaKind.ARRAY,
    "string": SchemaKind.STRING,
    "number": SchemaKind.NUMBER,
    "integer": SchemaKind.NUMBER,
    "boolean": SchemaKind.BOOLEAN,
}


def _enum_key(value: Any) -> tuple:
    """Hashable key for an enum value that keeps JSON types apart.

    ``True == 1`` in Python, but an enum of ``[1]`` and one of ``[true]``
    accept different values and must not compare equal.
    """
    if isinstance(value, bool):
        return ("boolean", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, (list, dict)):
        return ("json", json.dumps(value, sort_keys=True, default=repr))
    return (type(value).__name__, value)


@dataclass(frozen=True)
class SchemaNode:
    """Immutable structural shape of one value.

    Attributes:
        kind: What the value must be.
        properties: Child shapes for ``object`` nodes, keyed by property
            name. Declaration order drives validation order.
        required: Names of properties that must be present.
        items: Shape of every element of an ``array`` node.
        enum_values: Allowed values of an ``enum`` node.
        description: Free-text description, carried into prompts.
        additional_properties: When False, an ``object`` node rejects
            properties it does not declare.

    Example::

        from mend import SchemaNode

        person = SchemaNode.object(
            {"name": SchemaNode.string(), "age": SchemaNode.number()},
            required=["name", "age"],
        )
    """

    kind: SchemaKind
    properties: Mapping[str, SchemaNode] | None = None
    required: frozenset[str] = frozenset()
    items: SchemaNode | None = None
    enum_values: tuple[Any, ...] | None = None
    description: str | None = None
    additional_properties: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.kind, SchemaKind):
            try:
                object.__setattr__(self, "kind", SchemaKind(self.kind))
            except ValueError:
                raise SchemaDefinitionError("$", f"unknown kind {self.kind!r}") from None
        if self.properties is not None:
            object.__setattr__(
                self, "properties", types.MappingProxyType(dict(self.properties))
            )
        if not isinstance(self.required, frozenset):
            object.__setattr__(self, "required", frozenset(self.required))
        if self.enum_values is not None and not isinstance(self.enum_values, tuple):
            object.__setattr__(self, "enum_values", tuple(self.enum_values))

    def _identity(self) -> tuple:
        props = tuple(self.properties.items()) if self.properties else ()
        enum_key = (
            tuple(_enum_key(v) for v in self.enum_values)
            if self.enum_values is not None
            else None
        )
        return (
            self.kind, props, self.required, self.items, enum_key,
            self.description, self.additional_properties,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SchemaNode):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def object(
        cls,
        properties: Mapping[str, SchemaNode],
        required: Iterable[str] | None = None,
        *,
        description: str | None = None,
        additional_properties: bool = True,
    ) -> SchemaNode:
        """Create an object schema."""
        return cls(
            kind=SchemaKind.OBJECT,
            properties=properties,
            required=frozenset(required or ()),
            description=description,
            additional_properties=additional_properties,
        )

    @classmethod
    def array(cls, items: SchemaNode, *, description: str | None = None) -> SchemaNode:
        """Create an array schema."""
        return cls(kind=SchemaKind.ARRAY, items=items, description=description)

    @classmethod
    def string(cls, description: str | None = None) -> SchemaNode:
        return cls(kind=SchemaKind.STRING, description=description)

    @classmethod
    def number(cls, description: str | None = None) -> SchemaNode:
        return cls(kind=SchemaKind.NUMBER, description=description)

    @classmethod
    def boolean(cls, description: str | None = None) -> SchemaNode:
        return cls(kind=SchemaKind.BOOLEAN, description=description)

    @classmethod
    def enum(cls, values: Iterable[Any], *, description: str | None = None) -> SchemaNode:
        """Create an enum schema from its allowed values."""
        return cls(kind=SchemaKind.ENUM, enum_values=tuple(values), description=description)

    # ------------------------------------------------------------------
    # Dict form
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Convert to the JSON-schema dict form.

        Key order is fixed and properties keep declaration order, so
        ``json.dumps(node.to_dict())`` is stable for equal schemas.
        """
        d: dict[str, Any] = {}
        if self.kind is SchemaKind.ENUM:
            values = list(self.enum_values or ())
            if values and all(isinstance(v, str) for v in values):
                d["type"] = "string"
            d["enum"] = values
        else:
            d["type"] = self.kind.value
        if self.description:
            d["description"] = self.description
        if self.kind is SchemaKind.OBJECT:
            props = self.properties or {}
            d["properties"] = {name: node.to_dict() for name, node in props.items()}
            # Declared order first; undeclared names are a schema error
            # but are still emitted so the dict round-trips.
            ordered = [name for name in props if name in self.required]
            ordered += sorted(self.required - set(props))
            if ordered:
                d["required"] = ordered
            if not self.additional_properties:
                d["additionalProperties"] = False
        if self.kind is SchemaKind.ARRAY and self.items is not None:
            d["items"] = self.items.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any], *, _path: str = "$") -> SchemaNode:
        """Build a SchemaNode from its JSON-schema dict form.

        Accepts what to_dict() produces: ``type``, ``description``,
        ``properties``, ``required``, ``items``, ``enum`` and a boolean
        ``additionalProperties``. Other keys are ignored.

        Raises:
            SchemaDefinitionError: If the dict cannot describe a node.
        """
        if not isinstance(d, Mapping):
            raise SchemaDefinitionError(_path, f"expected a mapping, got {type(d).__name__}")

        description = d.get("description")
        if "enum" in d:
            values = d["enum"]
            if not isinstance(values, list):
                raise SchemaDefinitionError(_path, "'enum' must be a list")
            return cls.enum(values, description=description)

        type_name = d.get("type")
        kind = _TYPE_NAMES.get(type_name) if isinstance(type_name, str) else None
        if kind is None:
            raise SchemaDefinitionError(_path, f"unsupported type {type_name!r}")

        if kind is SchemaKind.OBJECT:
            raw_props = d.get("properties") or {}
            if not isinstance(raw_props, Mapping):
                raise SchemaDefinitionError(_path, "'properties' must be a mapping")
            props = {
                name: cls.from_dict(sub, _path=f"{_path}.{name}")
                for name, sub in raw_props.items()
            }
            additional = d.get("additionalProperties", True)
            if not isinstance(additional, bool):
                raise SchemaDefinitionError(
                    _path, "only boolean 'additionalProperties' is supported"
                )
            return cls.object(
                props,
                required=d.get("required") or (),
                description=description,
                additional_properties=additional,
            )

        if kind is SchemaKind.ARRAY:
            raw_items = d.get("items")
            if raw_items is None:
                raise SchemaDefinitionError(_path, "array schema requires 'items'")
            return cls.array(cls.from_dict(raw_items, _path=f"{_path}[]"), description=description)

        return cls(kind=kind, description=description)
