"""
Operation Parser.

Turns a single (resolved, sanitized) OpenAPI operation object into the
pieces a tool needs:

- parameters: path/query/header/cookie parameters plus the request body,
  flattened into ApiParameter records with unique ``py_name`` values
- return value: the schema of the lowest 2xx response
- function name: snake_case operationId, capped at the declaration limit
- JSON Schema for the tool's arguments

Request bodies are flattened by shape (first media type only):

    object with properties  ->  one parameter per property
    array                   ->  one parameter named "array"
    anything else           ->  one parameter named "body"
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from typing import Any

from .common import ApiParameter, ParamLocation, create_api_parameter, to_snake_case
from .schema import ArraySchema, ObjectSchema, schema_from_dict

logger = logging.getLogger(__name__)

# Longest function name accepted by model function-calling APIs
MAX_FUNCTION_NAME_LENGTH = 60


def first_media_type(content: Any) -> tuple[str, dict[str, Any]] | None:
    """Return ``(media_type, media_object)`` for the first entry of a content map."""
    if not isinstance(content, dict):
        return None
    for media_type, media in content.items():
        return media_type, media if isinstance(media, dict) else {}
    return None


def first_security_scheme_name(requirements: Any) -> str | None:
    """Name of the first scheme in a ``security`` requirement list."""
    if not isinstance(requirements, list):
        return None
    for requirement in requirements:
        if isinstance(requirement, dict):
            for name in requirement:
                return name
    return None


class OperationParser:
    """
    Parses one OpenAPI operation.

    Example:
        parser = OperationParser(spec["paths"]["/pets"]["get"])
        parser.get_function_name()   # "list_pets"
        parser.get_parameters()      # [ApiParameter(original_name="limit", ...)]
        parser.get_json_schema()     # {"type": "object", "properties": {...}, ...}
    """

    def __init__(self, operation: dict[str, Any], should_parse: bool = True):
        self._operation = operation
        self._params: list[ApiParameter] = []
        self._return_value: ApiParameter | None = None
        if should_parse:
            self._process_operation_parameters()
            self._process_request_body()
            self._process_return_value()
            self._dedupe_param_names()

    @classmethod
    def load(
        cls,
        operation: dict[str, Any],
        params: list[ApiParameter],
        return_value: ApiParameter | None = None,
    ) -> OperationParser:
        """Build a parser around already-parsed parameters."""
        parser = cls(operation, should_parse=False)
        parser._params = list(params)
        parser._return_value = return_value
        return parser

    # =========================================================================
    # Parsing
    # =========================================================================

    def _process_operation_parameters(self) -> None:
        for param in self._operation.get("parameters") or []:
            if not isinstance(param, dict) or not param.get("name"):
                logger.warning(f"[operation_parser] Skipping malformed parameter: {param!r}")
                continue

            schema = param.get("schema")
            if schema is None:
                # Parameters may carry their schema inside a content map instead
                media = first_media_type(param.get("content"))
                schema = media[1].get("schema", {}) if media else {}

            node = schema_from_dict(schema)
            self._params.append(
                create_api_parameter(
                    param["name"],
                    param.get("in", ""),
                    node,
                    description=param.get("description") or node.description,
                    required=bool(param.get("required", False)),
                )
            )

    def _process_request_body(self) -> None:
        request_body = self._operation.get("requestBody")
        if not isinstance(request_body, dict):
            return

        media = first_media_type(request_body.get("content"))
        if media is None:
            return

        _, media_object = media
        node = schema_from_dict(media_object.get("schema", {}))
        description = request_body.get("description") or node.description
        body_required = bool(request_body.get("required", False))

        if isinstance(node, ObjectSchema) and node.properties:
            for name, prop in node.properties.items():
                self._params.append(
                    create_api_parameter(
                        name,
                        ParamLocation.BODY,
                        prop,
                        description=prop.description,
                        required=name in node.required,
                    )
                )
        elif isinstance(node, ArraySchema):
            self._params.append(
                create_api_parameter(
                    "array",
                    ParamLocation.BODY,
                    node,
                    description=description,
                    required=body_required,
                )
            )
        else:
            self._params.append(
                create_api_parameter(
                    "",
                    ParamLocation.BODY,
                    node,
                    description=description,
                    required=body_required,
                )
            )

    def _process_return_value(self) -> None:
        responses = self._operation.get("responses")
        if not isinstance(responses, dict):
            return

        success_codes = sorted(
            str(code)
            for code in responses
            if str(code).isdigit() and str(code).startswith("2") and len(str(code)) == 3
        )
        if not success_codes:
            return

        response = responses.get(success_codes[0])
        if response is None:
            response = responses.get(int(success_codes[0]), {})
        media = first_media_type(response.get("content") if isinstance(response, dict) else None)
        schema = media[1].get("schema", {}) if media else {}
        self._return_value = create_api_parameter("", ParamLocation.NONE, schema)

    def _dedupe_param_names(self) -> None:
        """First occurrence keeps its name; later ones get the next free ``_<n>``."""
        taken = {param.py_name for param in self._params}
        used: set[str] = set()
        next_suffix: Counter[str] = Counter()
        deduped = []
        for param in self._params:
            name = param.py_name
            if name in used:
                candidate = f"{name}_{next_suffix[name]}"
                while candidate in taken:
                    next_suffix[name] += 1
                    candidate = f"{name}_{next_suffix[name]}"
                next_suffix[name] += 1
                taken.add(candidate)
                param = replace(param, py_name=candidate)
            used.add(param.py_name)
            deduped.append(param)
        self._params = deduped

    # =========================================================================
    # Accessors
    # =========================================================================

    def get_function_name(self) -> str:
        operation_id = self._operation.get("operationId")
        if not operation_id:
            raise ValueError("Operation ID is missing")
        return to_snake_case(str(operation_id))[:MAX_FUNCTION_NAME_LENGTH]

    def get_parameters(self) -> list[ApiParameter]:
        return list(self._params)

    def get_return_value(self) -> ApiParameter | None:
        return self._return_value

    def get_auth_scheme_name(self) -> str | None:
        """First scheme named by the operation's own ``security`` list."""
        return first_security_scheme_name(self._operation.get("security"))

    def get_json_schema(self) -> dict[str, Any]:
        """
        JSON Schema describing the tool's arguments.

        Properties are keyed by ``py_name``; only required parameters are
        listed under ``required``.
        """
        properties: dict[str, Any] = {}
        for param in self._params:
            prop = param.param_schema.to_dict()
            if param.description and "description" not in prop:
                prop["description"] = param.description
            properties[param.py_name] = prop

        return {
            "title": f"{self._operation.get('operationId', 'operation')}_Arguments",
            "type": "object",
            "properties": properties,
            "required": [param.py_name for param in self._params if param.required],
        }
