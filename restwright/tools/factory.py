"""
Tool Factory.

Turns compiled operations into RestApiTool instances. Settings shared by
every tool of one API (header provider, TLS verification, name prefix,
HTTP client) live on the factory so each ParsedOperation is consumed
exactly once.

Usage:
    factory = ToolFactory(name_prefix="petstore", ssl_verify=False)
    tools = factory.build_tools(OpenApiSpecParser().parse(spec_dict))
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import TYPE_CHECKING

from restwright.openapi.operation_parser import MAX_FUNCTION_NAME_LENGTH

from .rest_api_tool import HeaderProvider, RestApiTool

if TYPE_CHECKING:
    import httpx

    from restwright.auth.refresher import CredentialRefresherRegistry
    from restwright.openapi.spec_parser import ParsedOperation

logger = logging.getLogger(__name__)


def prefixed_tool_name(name: str, prefix: str | None) -> str:
    """Prepend ``prefix`` to a tool name, keeping within the length limit."""
    if prefix:
        name = f"{prefix}_{name}"
    return name[:MAX_FUNCTION_NAME_LENGTH]


class ToolFactory:
    """
    Builds RestApiTool instances from ParsedOperation records.

    Attributes:
        header_provider: Callable returning extra headers per invocation context
        ssl_verify: TLS verification (bool or CA bundle path); None uses settings
        name_prefix: Prefix added to every tool name
        timeout: Request timeout in seconds; None uses settings
        http_client: Shared client (caller manages its lifecycle)
    """

    def __init__(
        self,
        *,
        header_provider: HeaderProvider | None = None,
        ssl_verify: bool | str | None = None,
        name_prefix: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        refresher_registry: CredentialRefresherRegistry | None = None,
    ) -> None:
        self.header_provider = header_provider
        self.ssl_verify = ssl_verify
        self.name_prefix = name_prefix
        self.timeout = timeout
        self.http_client = http_client
        self.refresher_registry = refresher_registry

    def build_tool(self, parsed: ParsedOperation) -> RestApiTool:
        if self.name_prefix:
            parsed = replace(parsed, name=prefixed_tool_name(parsed.name, self.name_prefix))
        return RestApiTool.from_parsed_operation(
            parsed,
            header_provider=self.header_provider,
            ssl_verify=self.ssl_verify,
            timeout=self.timeout,
            http_client=self.http_client,
            refresher_registry=self.refresher_registry,
        )

    def build_tools(self, operations: Sequence[ParsedOperation]) -> list[RestApiTool]:
        tools = [self.build_tool(parsed) for parsed in operations]
        logger.debug(f"[tool_factory] Built {len(tools)} tools")
        return tools
