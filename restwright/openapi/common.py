"""
Common OpenAPI types: endpoints, parameters and naming helpers.

Parameter names from a spec ("X-Request-Id", "class", "pageSize") are not
always valid or comfortable Python identifiers. Every ApiParameter carries
a derived ``py_name`` that is:

- snake_case (``pageSize`` -> ``page_size``)
- escaped if it is a Python keyword (``class`` -> ``param_class``)
- deterministic, so parsing the same document twice yields the same names
"""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .schema import SchemaNode, ScalarSchema, schema_from_dict

RESERVED_PREFIX = "param_"

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")


class ParamLocation(str, Enum):
    """Where a parameter goes in the HTTP request."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"
    BODY = "body"
    # Return values and other non-request parameters
    NONE = ""


_DEFAULT_PARAM_NAMES = {
    ParamLocation.BODY: "body",
    ParamLocation.QUERY: "query_param",
    ParamLocation.PATH: "path_param",
    ParamLocation.HEADER: "header_param",
    ParamLocation.COOKIE: "cookie_param",
}


def to_snake_case(text: str) -> str:
    """
    Convert an identifier-ish string to snake_case.

    Examples:
        listPets -> list_pets
        HTTPResponseCode -> http_response_code
        /pets/{petId}_get -> pets_pet_id_get
    """
    if not text:
        return text

    result = _ACRONYM_BOUNDARY.sub(r"\1_\2", text)
    result = _CAMEL_BOUNDARY.sub(r"\1_\2", result)
    result = _NON_ALNUM.sub("_", result)
    return result.lower().strip("_")


def rename_reserved_keywords(name: str, prefix: str = RESERVED_PREFIX) -> str:
    """Prefix Python keywords so they can be used as argument names."""
    if keyword.iskeyword(name):
        return f"{prefix}{name}"
    return name


def parse_location(value: Any) -> ParamLocation:
    """Map an OpenAPI ``in`` value onto ParamLocation (unknown -> NONE)."""
    try:
        return ParamLocation(str(value or "").lower())
    except ValueError:
        return ParamLocation.NONE


@dataclass(frozen=True, slots=True)
class OperationEndpoint:
    """Where an operation lives: base URL, path template and HTTP method."""

    base_url: str
    path: str
    method: str


@dataclass(frozen=True, slots=True)
class ApiParameter:
    """
    A single parameter of an API operation.

    Attributes:
        original_name: Name as written in the OpenAPI document (used on the wire)
        param_location: Where the value is placed in the request
        param_schema: Narrowed schema node
        description: Human-readable description
        py_name: Tool-safe argument name (unique within one operation)
        required: Whether the caller must supply a value
    """

    original_name: str
    param_location: ParamLocation
    param_schema: SchemaNode
    description: str
    py_name: str
    required: bool = False


def create_api_parameter(
    original_name: str,
    param_location: ParamLocation | str,
    param_schema: SchemaNode | dict[str, Any] | None = None,
    *,
    description: str | None = None,
    required: bool = False,
) -> ApiParameter:
    """
    Build an ApiParameter and derive its ``py_name``.

    Args:
        original_name: Name from the OpenAPI document (may be empty for scalar bodies)
        param_location: ParamLocation or raw ``in`` value
        param_schema: SchemaNode or raw schema dict
        description: Explicit description (falls back to the schema's)
        required: Whether the parameter is required
    """
    location = (
        param_location
        if isinstance(param_location, ParamLocation)
        else parse_location(param_location)
    )

    if param_schema is None:
        schema: SchemaNode = ScalarSchema(raw={})
    elif isinstance(param_schema, dict):
        schema = schema_from_dict(param_schema)
    else:
        schema = param_schema

    py_name = rename_reserved_keywords(to_snake_case(original_name)) or _DEFAULT_PARAM_NAMES.get(
        location, "value"
    )

    return ApiParameter(
        original_name=original_name,
        param_location=location,
        param_schema=schema,
        description=description or schema.description or "",
        py_name=py_name,
        required=required,
    )
