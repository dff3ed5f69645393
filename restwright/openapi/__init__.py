"""
OpenAPI compilation.

    OpenApiSpecParser.parse(document)
        └── SpecResolver          (inline local $refs, break cycles)
        └── sanitize_schema_types (normalize schema "type" fields)
        └── OperationParser       (one per path + method)
                -> ParsedOperation

RequestBuilder turns a ParsedOperation's parameters and argument values
into a PreparedRequest at invocation time.
"""

from .common import (
    ApiParameter,
    OperationEndpoint,
    ParamLocation,
    create_api_parameter,
    rename_reserved_keywords,
    to_snake_case,
)
from .operation_parser import MAX_FUNCTION_NAME_LENGTH, OperationParser
from .request_builder import PreparedRequest, RequestBuilder
from .resolver import SpecResolver
from .sanitizer import sanitize_schema_types, sanitize_type_field
from .schema import (
    ArraySchema,
    ObjectSchema,
    ScalarSchema,
    SchemaNode,
    UnresolvedSchema,
    schema_from_dict,
)
from .spec_parser import OpenApiSpecParser, ParsedOperation

__all__ = [
    # Schema nodes
    "SchemaNode",
    "ObjectSchema",
    "ArraySchema",
    "ScalarSchema",
    "UnresolvedSchema",
    "schema_from_dict",
    # Parameters
    "ApiParameter",
    "OperationEndpoint",
    "ParamLocation",
    "create_api_parameter",
    "to_snake_case",
    "rename_reserved_keywords",
    # Compilation
    "SpecResolver",
    "sanitize_schema_types",
    "sanitize_type_field",
    "OperationParser",
    "MAX_FUNCTION_NAME_LENGTH",
    "OpenApiSpecParser",
    "ParsedOperation",
    # Requests
    "RequestBuilder",
    "PreparedRequest",
]
