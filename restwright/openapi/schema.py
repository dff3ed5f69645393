"""
Schema Nodes.

OpenAPI schemas arrive as loosely-typed dicts. They are narrowed into a
closed set of node types as soon as they are ingested:

    SchemaNode = ObjectSchema | ArraySchema | ScalarSchema | UnresolvedSchema

- ObjectSchema: ``type: object`` with (possibly empty) properties
- ArraySchema: ``type: array`` with an optional item schema
- ScalarSchema: everything else, including untyped and composite
  (oneOf/anyOf/allOf) schemas
- UnresolvedSchema: a ``$ref`` that survived resolution (a broken cycle)
  or a value that is not a dict at all

Every node keeps the sanitized source dict in ``raw`` so that the full
JSON Schema can be passed through unchanged (``to_dict()``).

Usage:
    node = schema_from_dict({"type": "object", "properties": {...}})
    if isinstance(node, ObjectSchema):
        for name, prop in node.properties.items():
            ...
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Union

VALID_SCHEMA_TYPES = frozenset(
    {"array", "boolean", "integer", "null", "number", "object", "string"}
)


def primary_type(type_value: Any) -> str | None:
    """
    Pick the type that decides a schema's shape.

    For union types (``["string", "null"]``) the first non-null entry wins.
    """
    if isinstance(type_value, str):
        return type_value
    if isinstance(type_value, (list, tuple)):
        for entry in type_value:
            if isinstance(entry, str) and entry != "null":
                return entry
        if "null" in type_value:
            return "null"
    return None


@dataclass(frozen=True, slots=True)
class _BaseSchema:
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def description(self) -> str:
        value = self.raw.get("description")
        return value if isinstance(value, str) else ""

    @property
    def has_default(self) -> bool:
        return "default" in self.raw

    @property
    def default(self) -> Any:
        return self.raw.get("default")

    @property
    def nullable(self) -> bool:
        type_value = self.raw.get("type")
        if isinstance(type_value, (list, tuple)) and "null" in type_value:
            return True
        return bool(self.raw.get("nullable", False))

    def to_dict(self) -> dict[str, Any]:
        """Return an independent copy of the JSON Schema for this node."""
        return copy.deepcopy(self.raw)


@dataclass(frozen=True, slots=True)
class ObjectSchema(_BaseSchema):
    properties: dict[str, SchemaNode] = field(default_factory=dict)
    required: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ArraySchema(_BaseSchema):
    items: SchemaNode | None = None


@dataclass(frozen=True, slots=True)
class ScalarSchema(_BaseSchema):
    type: str | None = None

    @property
    def is_composite(self) -> bool:
        return any(key in self.raw for key in ("oneOf", "anyOf", "allOf"))


@dataclass(frozen=True, slots=True)
class UnresolvedSchema(_BaseSchema):
    ref: str | None = None


SchemaNode = Union[ObjectSchema, ArraySchema, ScalarSchema, UnresolvedSchema]


def schema_from_dict(value: Any) -> SchemaNode:
    """
    Narrow a raw (resolved, sanitized) schema dict into a SchemaNode.

    Args:
        value: Schema dict, or anything else found where a schema was expected

    Returns:
        The matching SchemaNode variant
    """
    if not isinstance(value, dict):
        return UnresolvedSchema(raw={})

    if isinstance(value.get("$ref"), str):
        return UnresolvedSchema(raw=value, ref=value["$ref"])

    schema_type = primary_type(value.get("type"))

    if schema_type == "object":
        raw_props = value.get("properties")
        properties = {}
        if isinstance(raw_props, dict):
            properties = {name: schema_from_dict(prop) for name, prop in raw_props.items()}
        required = value.get("required")
        return ObjectSchema(
            raw=value,
            properties=properties,
            required=tuple(r for r in required if isinstance(r, str))
            if isinstance(required, list)
            else (),
        )

    if schema_type == "array":
        items = value.get("items")
        return ArraySchema(
            raw=value,
            items=schema_from_dict(items) if isinstance(items, dict) else None,
        )

    return ScalarSchema(raw=value, type=schema_type)
