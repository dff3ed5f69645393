"""
OpenAPI Spec Parser.

Compiles an OpenAPI 3.x document into ParsedOperation records, one per
(path, method) pair:

    document -> SpecResolver -> sanitize_schema_types -> collect operations

Compilation errors (external or dangling ``$ref``, malformed security
schemes) are raised here, before any tool exists.

Usage:
    operations = OpenApiSpecParser().parse(spec_dict)
    for op in operations:
        print(op.name, op.endpoint.method, op.endpoint.path)
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from restwright.auth.credential import AuthCredential
from restwright.auth.schemes import SUPPORTED_SCHEME_TYPES, AuthScheme, dict_to_auth_scheme
from restwright.errors import AuthConfigurationError

from .common import ApiParameter, OperationEndpoint, to_snake_case
from .operation_parser import OperationParser, first_security_scheme_name
from .resolver import SpecResolver
from .sanitizer import sanitize_schema_types

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_SERVER_VARIABLE = re.compile(r"\{([^}]+)\}")


@dataclass(frozen=True, slots=True)
class ParsedOperation:
    """
    A compiled operation, ready to become a tool.

    Attributes:
        name: Tool name (snake_case operationId, at most 60 characters)
        description: Operation description, falling back to its summary
        endpoint: Base URL, path template and method
        operation: The resolved operation object
        parameters: Flattened parameters in declaration order
        return_value: Schema of the lowest 2xx response
        auth_scheme: Narrowed security scheme, if the operation requires one
        auth_credential: Credential to use with ``auth_scheme``
        tags: Operation tags
    """

    name: str
    description: str
    endpoint: OperationEndpoint
    operation: dict[str, Any]
    parameters: tuple[ApiParameter, ...] = ()
    return_value: ApiParameter | None = None
    auth_scheme: AuthScheme | None = None
    auth_credential: AuthCredential | None = None
    tags: tuple[str, ...] = field(default=())


def _server_url(servers: Any) -> str | None:
    """URL of the first server, with variables replaced by their defaults."""
    if not isinstance(servers, list) or not servers:
        return None
    server = servers[0]
    if not isinstance(server, dict) or not isinstance(server.get("url"), str):
        return None

    variables = server.get("variables") or {}

    def substitute(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, dict) and "default" in variable:
            return str(variable["default"])
        return match.group(0)

    return _SERVER_VARIABLE.sub(substitute, server["url"])


def _merge_parameters(path_params: Any, operation_params: Any) -> list[dict[str, Any]]:
    """
    Merge path-level and operation-level parameters.

    Path-level parameters come first. An operation-level parameter with
    the same (name, in) replaces the path-level one in place.
    """
    merged: dict[tuple[Any, Any], dict[str, Any]] = {}
    for params in (path_params, operation_params):
        for param in params or []:
            if not isinstance(param, dict):
                continue
            merged[(param.get("name"), param.get("in"))] = param
    return list(merged.values())


class OpenApiSpecParser:
    """Compiles an OpenAPI document into ParsedOperation records."""

    def parse(self, spec_dict: dict[str, Any]) -> list[ParsedOperation]:
        """
        Resolve, sanitize and collect operations.

        The input document is never mutated.

        Raises:
            SpecResolutionError: External or dangling ``$ref``
            AuthConfigurationError: A referenced security scheme is malformed
        """
        document = copy.deepcopy(spec_dict)
        document = SpecResolver(document).resolve()
        sanitize_schema_types(document)
        return self._collect_operations(document)

    def _collect_operations(self, document: dict[str, Any]) -> list[ParsedOperation]:
        operations: list[ParsedOperation] = []

        document_base_url = _server_url(document.get("servers")) or ""
        global_security = document.get("security")
        components = document.get("components") or {}
        security_schemes = components.get("securitySchemes") or {}
        narrowed: dict[str, AuthScheme | None] = {}

        paths = document.get("paths") or {}
        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue

            path_base_url = _server_url(path_item.get("servers")) or document_base_url

            for method, operation in path_item.items():
                if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                    continue

                operation = dict(operation)
                operation["parameters"] = _merge_parameters(
                    path_item.get("parameters"), operation.get("parameters")
                )
                if not operation.get("operationId"):
                    operation["operationId"] = to_snake_case(f"{path}_{method}")

                parser = OperationParser(operation)

                # An operation's own security list wins, even when empty
                if "security" in operation:
                    scheme_name = parser.get_auth_scheme_name()
                else:
                    scheme_name = first_security_scheme_name(global_security)

                auth_scheme = None
                if scheme_name:
                    if scheme_name not in narrowed:
                        narrowed[scheme_name] = self._narrow_scheme(
                            scheme_name, security_schemes.get(scheme_name)
                        )
                    auth_scheme = narrowed[scheme_name]

                base_url = _server_url(operation.get("servers")) or path_base_url
                tags = operation.get("tags")

                operations.append(
                    ParsedOperation(
                        name=parser.get_function_name(),
                        description=operation.get("description") or operation.get("summary") or "",
                        endpoint=OperationEndpoint(
                            base_url=base_url,
                            path=path,
                            method=method.lower(),
                        ),
                        operation=operation,
                        parameters=tuple(parser.get_parameters()),
                        return_value=parser.get_return_value(),
                        auth_scheme=auth_scheme,
                        tags=tuple(t for t in tags if isinstance(t, str))
                        if isinstance(tags, list)
                        else (),
                    )
                )

        logger.info(f"[spec_parser] Collected {len(operations)} operations")
        return operations

    def _narrow_scheme(self, name: str, raw_scheme: Any) -> AuthScheme | None:
        if not isinstance(raw_scheme, dict):
            logger.warning(f"[spec_parser] Security scheme '{name}' is not defined")
            return None

        scheme_type = raw_scheme.get("type")
        if scheme_type not in SUPPORTED_SCHEME_TYPES:
            logger.warning(
                f"[spec_parser] Ignoring security scheme '{name}' of unsupported type {scheme_type!r}"
            )
            return None

        try:
            return dict_to_auth_scheme(raw_scheme)
        except ValidationError as e:
            raise AuthConfigurationError(f"Invalid security scheme '{name}': {e}") from e
