"""
REST API Tool.

A RestApiTool wraps one compiled OpenAPI operation:

1. Declaration: name, description and parameter schema for the model layer
2. Auth: credentials are prepared by ToolAuthHandler before every call
3. Request: arguments are mapped onto an HTTP request by RequestBuilder
4. Result: the response is returned as a dict; HTTP and network failures
   are reported as ``{"error": ...}`` instead of raised

HTTP client lifecycle:
    If an ``http_client`` is supplied it is used as-is (the caller owns it).
    Otherwise a fresh client is created for each call and closed afterward.

Usage:
    tool = RestApiTool.from_parsed_operation(parsed)
    result = await tool.invoke({"user_id": "42"}, ToolContext())

    # With a shared client for connection pooling:
    async with httpx.AsyncClient() as client:
        tool = RestApiTool.from_parsed_operation(parsed, http_client=client)
        result = await tool.invoke({"user_id": "42"}, context)
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping

import httpx

from restwright.auth.credential import AuthCredential
from restwright.auth.handler import AuthPreparationState, ToolAuthHandler
from restwright.auth.helpers import credential_to_param
from restwright.auth.schemes import AuthScheme, dict_to_auth_scheme
from restwright.config.features import FeatureName, is_feature_enabled
from restwright.config.settings import get_settings
from restwright.openapi.common import ApiParameter, OperationEndpoint
from restwright.openapi.operation_parser import MAX_FUNCTION_NAME_LENGTH, OperationParser
from restwright.openapi.request_builder import PreparedRequest, RequestBuilder
from restwright.openapi.schema import primary_type

from .base import Tool, ToolAnnotations

if TYPE_CHECKING:
    from restwright.auth.refresher import CredentialRefresherRegistry
    from restwright.openapi.spec_parser import ParsedOperation

    from .context import InvocationContext

logger = logging.getLogger(__name__)

HeaderProvider = Callable[["InvocationContext"], Mapping[str, str]]

PENDING_AUTH_MESSAGE = "Needs your authorization to access your data."


# =============================================================================
# Declaration Schema
# =============================================================================

_PASSTHROUGH_KEYS = ("title", "description", "format", "default", "pattern", "minimum", "maximum", "example")

_RENAMED_KEYS = {
    "minItems": "min_items",
    "maxItems": "max_items",
    "minLength": "min_length",
    "maxLength": "max_length",
    "minProperties": "min_properties",
    "maxProperties": "max_properties",
}


def to_structured_schema(schema: Any) -> dict[str, Any]:
    """
    Convert a JSON Schema into the structured declaration form.

    Types are upper-cased (``OBJECT``, ``STRING``), nullability becomes a
    ``nullable`` flag, enum values are strings, ``anyOf``/``oneOf`` become
    ``any_of`` and camelCase bounds become snake_case.

    Example:
        to_structured_schema({"type": ["integer", "null"], "minimum": 1})
        # {"type": "INTEGER", "nullable": True, "minimum": 1}
    """
    if not isinstance(schema, dict):
        return {}

    all_of = schema.get("allOf")
    if isinstance(all_of, list) and len(all_of) == 1 and isinstance(all_of[0], dict):
        merged = {k: v for k, v in schema.items() if k != "allOf"}
        schema = {**all_of[0], **merged}

    result: dict[str, Any] = {}

    type_value = schema.get("type")
    schema_type = primary_type(type_value)
    if schema_type is None and isinstance(schema.get("properties"), dict):
        schema_type = "object"
    if schema_type and schema_type != "null":
        result["type"] = schema_type.upper()
    if (isinstance(type_value, list) and "null" in type_value) or schema.get("nullable"):
        result["nullable"] = True

    for key in _PASSTHROUGH_KEYS:
        if key in schema:
            result[key] = copy.deepcopy(schema[key])
    for key, renamed in _RENAMED_KEYS.items():
        if key in schema:
            result[renamed] = schema[key]

    if isinstance(schema.get("enum"), list):
        result["enum"] = [str(value) for value in schema["enum"] if value is not None]

    if isinstance(schema.get("properties"), dict):
        result["properties"] = {
            name: to_structured_schema(prop) for name, prop in schema["properties"].items()
        }
    if isinstance(schema.get("required"), list):
        result["required"] = list(schema["required"])
    if "items" in schema:
        result["items"] = to_structured_schema(schema["items"])

    for composite in ("anyOf", "oneOf"):
        if isinstance(schema.get(composite), list):
            result["any_of"] = [to_structured_schema(option) for option in schema[composite]]

    return result


# =============================================================================
# REST API Tool
# =============================================================================


class RestApiTool(Tool):
    """
    A Tool generated from a single OpenAPI operation.

    Example:
        tool = RestApiTool(
            name="get_user",
            description="Fetch a user",
            endpoint=OperationEndpoint("https://api.example.com", "/users/{user_id}", "get"),
            operation=spec["paths"]["/users/{user_id}"]["get"],
        )
        result = await tool.invoke({"user_id": "42"}, context)
    """

    def __init__(
        self,
        name: str,
        description: str,
        endpoint: OperationEndpoint,
        operation: dict[str, Any],
        *,
        parameters: list[ApiParameter] | None = None,
        return_value: ApiParameter | None = None,
        auth_scheme: AuthScheme | dict[str, Any] | None = None,
        auth_credential: AuthCredential | dict[str, Any] | None = None,
        header_provider: HeaderProvider | None = None,
        ssl_verify: bool | str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        refresher_registry: CredentialRefresherRegistry | None = None,
    ):
        settings = get_settings()

        self._name = name[:MAX_FUNCTION_NAME_LENGTH]
        self._description = description
        self.endpoint = endpoint
        self.operation = operation
        if parameters is None:
            self._operation_parser = OperationParser(operation)
        else:
            self._operation_parser = OperationParser.load(operation, parameters, return_value)

        self._auth_scheme: AuthScheme | None = None
        self._auth_credential: AuthCredential | None = None
        self.configure_auth_scheme(auth_scheme)
        self.configure_auth_credential(auth_credential)

        self._header_provider = header_provider
        self._ssl_verify = settings.ssl_verify if ssl_verify is None else ssl_verify
        self._timeout = settings.request_timeout if timeout is None else timeout
        self._shared_client = http_client
        self._refreshers = refresher_registry
        self._user_agent_prefix = settings.user_agent_prefix
        self._default_headers: dict[str, str] = {}
        self._builder = self._make_builder()

    @classmethod
    def from_parsed_operation(cls, parsed: ParsedOperation, **kwargs: Any) -> RestApiTool:
        """Build a tool from a compiled operation."""
        kwargs.setdefault("auth_scheme", parsed.auth_scheme)
        kwargs.setdefault("auth_credential", parsed.auth_credential)
        return cls(
            name=parsed.name,
            description=parsed.description,
            endpoint=parsed.endpoint,
            operation=parsed.operation,
            parameters=list(parsed.parameters),
            return_value=parsed.return_value,
            **kwargs,
        )

    # =========================================================================
    # Declaration
    # =========================================================================

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> dict[str, Any]:
        return self._operation_parser.get_json_schema()

    @property
    def parameters(self) -> list[ApiParameter]:
        return self._operation_parser.get_parameters()

    @property
    def return_value(self) -> ApiParameter | None:
        return self._operation_parser.get_return_value()

    @property
    def annotations(self) -> ToolAnnotations:
        return ToolAnnotations.for_http_method(
            self.endpoint.method,
            title=self.operation.get("summary") or self.name,
        )

    def declaration(self) -> dict[str, Any]:
        """
        Function declaration for the model layer.

        With the JSON_SCHEMA_FOR_FUNC_DECL feature enabled the parameter
        JSON Schema is passed through unchanged as ``parameters_json_schema``;
        otherwise it is converted to the structured ``parameters`` form.
        """
        if is_feature_enabled(FeatureName.JSON_SCHEMA_FOR_FUNC_DECL):
            return {
                "name": self.name,
                "description": self.description,
                "parameters_json_schema": self.input_schema,
            }
        return {
            "name": self.name,
            "description": self.description,
            "parameters": to_structured_schema(self.input_schema),
        }

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def auth_scheme(self) -> AuthScheme | None:
        return self._auth_scheme

    @property
    def auth_credential(self) -> AuthCredential | None:
        return self._auth_credential

    def configure_auth_scheme(self, auth_scheme: AuthScheme | dict[str, Any] | None) -> None:
        if isinstance(auth_scheme, dict):
            auth_scheme = dict_to_auth_scheme(auth_scheme)
        self._auth_scheme = auth_scheme

    def configure_auth_credential(
        self, auth_credential: AuthCredential | dict[str, Any] | None
    ) -> None:
        if isinstance(auth_credential, dict):
            auth_credential = AuthCredential.model_validate(auth_credential)
        self._auth_credential = auth_credential

    @property
    def ssl_verify(self) -> bool | str:
        return self._ssl_verify

    def configure_ssl_verify(self, ssl_verify: bool | str) -> None:
        self._ssl_verify = ssl_verify

    def set_default_headers(self, headers: Mapping[str, str]) -> None:
        self._default_headers = dict(headers)
        self._builder = self._make_builder()

    def _make_builder(self) -> RequestBuilder:
        return RequestBuilder(
            self.endpoint,
            self.operation,
            self.name,
            default_headers=self._default_headers,
            user_agent_prefix=self._user_agent_prefix,
        )

    # =========================================================================
    # Invocation
    # =========================================================================

    async def invoke(self, args: dict[str, Any], context: InvocationContext) -> dict[str, Any]:
        """
        Call the REST endpoint.

        Returns:
            - ``{"pending": True, "message": ...}`` while user authorization
              is outstanding (no HTTP request is made)
            - parsed JSON for 2xx JSON responses, else ``{"text": body}``
            - ``{"error": ...}`` for non-2xx responses and network errors

        Raises:
            AuthConfigurationError: The auth scheme lacks required client settings
        """
        auth_handler = ToolAuthHandler.from_tool_context(
            context,
            self._auth_scheme,
            self._auth_credential,
            refresher_registry=self._refreshers,
        )
        auth_result = await auth_handler.prepare_auth_credentials()
        if auth_result.state == AuthPreparationState.PENDING:
            logger.info(f"[rest_api_tool:{self.name}] Waiting for user authorization")
            return {"pending": True, "message": PENDING_AUTH_MESSAGE}

        request = self._prepare_request(args, context, auth_result.auth_scheme, auth_result.auth_credential)
        logger.info(f"[rest_api_tool:{self.name}] {request.method} {request.url}")

        try:
            response = await self._send(request)
        except httpx.HTTPError as e:
            logger.error(f"[rest_api_tool:{self.name}] Network error: {e}")
            return {"error": f"Tool {self.name} execution failed. Network error: {e}"}

        logger.info(f"[rest_api_tool:{self.name}] Response: {response.status_code}")

        if not 200 <= response.status_code < 300:
            logger.warning(
                f"[rest_api_tool:{self.name}] Error {response.status_code}: {response.text[:500]}"
            )
            return {
                "error": (
                    f"Tool {self.name} execution failed. Analyze this execution error"
                    " and your inputs. Retry with adjustments if applicable. But"
                    " make sure don't retry more than 3 times. Execution Error:"
                    f" Status Code: {response.status_code}, {response.text}"
                )
            }

        content_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
        if content_type == "application/json" or content_type.endswith("+json"):
            try:
                return response.json()
            except ValueError:
                logger.warning(f"[rest_api_tool:{self.name}] Response declared JSON but did not parse")
        return {"text": response.text}

    def _prepare_arguments(self, args: Mapping[str, Any]) -> dict[str, Any]:
        """Copy arguments and fill required parameters that have a schema default."""
        arguments = dict(args)
        for param in self._operation_parser.get_parameters():
            if (
                param.required
                and arguments.get(param.py_name) is None
                and param.param_schema.has_default
            ):
                arguments[param.py_name] = copy.deepcopy(param.param_schema.default)
        return arguments

    def _collect_headers(self, context: InvocationContext) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._header_provider is not None:
            headers.update(self._header_provider(context) or {})
        headers.update(getattr(context, "request_headers", None) or {})
        return headers

    def _prepare_request(
        self,
        args: Mapping[str, Any],
        context: InvocationContext,
        auth_scheme: AuthScheme | None,
        auth_credential: AuthCredential | None,
    ) -> PreparedRequest:
        arguments = self._prepare_arguments(args)
        parameters = self._operation_parser.get_parameters()

        auth_param = credential_to_param(auth_scheme, auth_credential)
        if auth_param is not None:
            param, values = auth_param
            parameters.append(param)
            arguments.update(values)

        return self._builder.build(parameters, arguments, extra_headers=self._collect_headers(context))

    async def _send(self, request: PreparedRequest) -> httpx.Response:
        if self._shared_client is not None:
            return await self._shared_client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )

        async with httpx.AsyncClient(timeout=self._timeout, verify=self._ssl_verify) as client:
            return await client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )

    def __repr__(self) -> str:
        return (
            f"RestApiTool(name={self.name!r}, method={self.endpoint.method.upper()!r}, "
            f"path={self.endpoint.path!r})"
        )
