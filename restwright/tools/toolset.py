"""
OpenAPI Toolset.

Entry point for turning an OpenAPI 3.x specification into tools:

    OpenAPIToolset
        └── OpenApiSpecParser (compiles the document)
        └── ToolFactory       (one RestApiTool per operation)

Usage:
    # From a dict
    toolset = OpenAPIToolset(spec_dict=spec)

    # From a JSON or YAML string
    toolset = OpenAPIToolset(spec_str=yaml_text, spec_str_type="yaml")

    # From a URL
    toolset = await OpenAPIToolset.from_spec_url("https://api.example.com/openapi.json")

    # Apply one credential to every tool
    scheme, credential = token_to_scheme_credential("abc123")
    toolset = OpenAPIToolset(spec_dict=spec, auth_scheme=scheme, auth_credential=credential)

    tools = toolset.get_tools()
    tool = toolset.get_tool("list_pets")
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Callable, Literal, Union

import httpx
import yaml

from restwright.config.settings import get_settings
from restwright.errors import SpecLoadError
from restwright.openapi.spec_parser import OpenApiSpecParser

from .factory import ToolFactory
from .rest_api_tool import HeaderProvider, RestApiTool

if TYPE_CHECKING:
    from restwright.auth.credential import AuthCredential
    from restwright.auth.schemes import AuthScheme

    from .context import InvocationContext

logger = logging.getLogger(__name__)

ToolPredicate = Callable[[RestApiTool, "InvocationContext | None"], bool]
ToolFilter = Union[ToolPredicate, Sequence[str]]


def load_spec_str(spec_str: str, spec_str_type: Literal["json", "yaml"] = "json") -> dict[str, Any]:
    """
    Decode a JSON or YAML specification string.

    Raises:
        SpecLoadError: Unsupported type, undecodable text, or not a mapping
    """
    try:
        if spec_str_type == "json":
            document = json.loads(spec_str)
        elif spec_str_type == "yaml":
            document = yaml.safe_load(spec_str)
        else:
            raise SpecLoadError(f"Unsupported spec type: {spec_str_type!r}")
    except (ValueError, yaml.YAMLError) as e:
        raise SpecLoadError(f"Failed to parse {spec_str_type} spec: {e}") from e

    if not isinstance(document, dict):
        raise SpecLoadError("OpenAPI spec must decode to a mapping")
    return document


class OpenAPIToolset:
    """
    Collection of RestApiTools generated from one OpenAPI specification.

    Attributes:
        tool_filter: Tool names to expose, or a predicate ``(tool, context) -> bool``
        tool_name_prefix: Prefix added to every tool name
        header_provider: Callable returning extra headers per invocation context
        ssl_verify: TLS verification for every tool (bool or CA bundle path)
        pooled: Share one HTTP client between all tools until ``close()``
    """

    def __init__(
        self,
        *,
        spec_dict: dict[str, Any] | None = None,
        spec_str: str | None = None,
        spec_str_type: Literal["json", "yaml"] = "json",
        auth_scheme: AuthScheme | None = None,
        auth_credential: AuthCredential | None = None,
        tool_filter: ToolFilter | None = None,
        tool_name_prefix: str | None = None,
        header_provider: HeaderProvider | None = None,
        ssl_verify: bool | str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        pooled: bool = False,
    ):
        if spec_dict is None:
            if spec_str is None:
                raise SpecLoadError("Either spec_dict or spec_str is required")
            spec_dict = load_spec_str(spec_str, spec_str_type)

        settings = get_settings()
        self.tool_filter = tool_filter
        self._spec_info: dict[str, Any] = spec_dict.get("info") or {}
        self._owned_client: httpx.AsyncClient | None = None

        if http_client is None and pooled:
            self._owned_client = httpx.AsyncClient(
                timeout=settings.request_timeout if timeout is None else timeout,
                verify=settings.ssl_verify if ssl_verify is None else ssl_verify,
            )
            http_client = self._owned_client

        factory = ToolFactory(
            header_provider=header_provider,
            ssl_verify=ssl_verify,
            name_prefix=tool_name_prefix,
            timeout=timeout,
            http_client=http_client,
        )
        operations = OpenApiSpecParser().parse(spec_dict)
        self._tools: dict[str, RestApiTool] = {}
        for tool in factory.build_tools(operations):
            if tool.name in self._tools:
                logger.warning(f"[openapi_toolset] Duplicate tool name '{tool.name}', keeping the last one")
            self._tools[tool.name] = tool

        if auth_scheme is not None or auth_credential is not None:
            self._configure_auth_all(auth_scheme, auth_credential)

        logger.info(f"[openapi_toolset] Loaded {len(self._tools)} tools from {self.title!r}")

    @classmethod
    async def from_spec_url(
        cls,
        spec_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> OpenAPIToolset:
        """
        Fetch a JSON or YAML specification and build a toolset from it.

        Raises:
            SpecLoadError: The document could not be fetched or decoded
        """
        try:
            if http_client is not None:
                response = await http_client.get(spec_url)
                response.raise_for_status()
                text = response.text
            else:
                async with httpx.AsyncClient(timeout=get_settings().request_timeout) as client:
                    response = await client.get(spec_url)
                    response.raise_for_status()
                    text = response.text
        except httpx.HTTPError as e:
            raise SpecLoadError(f"Failed to fetch spec from {spec_url}: {e}") from e

        # Try JSON first; YAML is a superset for most documents
        try:
            spec_dict = load_spec_str(text, "json")
        except SpecLoadError:
            spec_dict = load_spec_str(text, "yaml")

        return cls(spec_dict=spec_dict, http_client=http_client, **kwargs)

    @property
    def title(self) -> str:
        """API title from spec."""
        return self._spec_info.get("title", "OpenAPI")

    @property
    def version(self) -> str:
        """API version from spec."""
        return self._spec_info.get("version", "unknown")

    def _configure_auth_all(
        self,
        auth_scheme: AuthScheme | None,
        auth_credential: AuthCredential | None,
    ) -> None:
        for tool in self._tools.values():
            if auth_scheme is not None:
                tool.configure_auth_scheme(auth_scheme)
            if auth_credential is not None:
                tool.configure_auth_credential(auth_credential)

    def configure_ssl_verify_all(self, ssl_verify: bool | str) -> None:
        """Set TLS verification on every tool."""
        for tool in self._tools.values():
            tool.configure_ssl_verify(ssl_verify)

    def _is_selected(self, tool: RestApiTool, context: InvocationContext | None) -> bool:
        if self.tool_filter is None:
            return True
        if callable(self.tool_filter):
            return self.tool_filter(tool, context)
        return tool.name in self.tool_filter

    def get_tools(
        self,
        context: InvocationContext | None = None,
        *,
        tags: list[str] | None = None,
    ) -> list[RestApiTool]:
        """
        Get the tools exposed by this toolset.

        Args:
            context: Passed to a predicate ``tool_filter``
            tags: Keep only operations carrying one of these tags
        """
        tools = []
        for tool in self._tools.values():
            if not self._is_selected(tool, context):
                continue
            if tags and not any(t in (tool.operation.get("tags") or []) for t in tags):
                continue
            tools.append(tool)
        return tools

    def get_tool(self, name: str) -> RestApiTool:
        """
        Get a tool by name.

        Raises:
            KeyError: If no tool has that name
        """
        if name not in self._tools:
            available = list(self._tools.keys())[:5]
            raise KeyError(f"Unknown tool: '{name}'. Available: {available}...")
        return self._tools[name]

    def list_tool_names(self) -> list[str]:
        return list(self._tools.keys())

    async def close(self) -> None:
        """Close the pooled HTTP client (a caller-supplied client is left open)."""
        if self._owned_client is not None:
            await self._owned_client.aclose()
            self._owned_client = None

    def __repr__(self) -> str:
        return (
            f"OpenAPIToolset(title={self.title!r}, "
            f"version={self.version!r}, "
            f"tools={len(self._tools)})"
        )
