"""
Restwright - turn OpenAPI specifications into agent-callable REST tools.

Restwright compiles an OpenAPI 3.x document into tools that an LLM agent
can call:

- **Compilation**: local ``$ref`` resolution with cycle breaking, schema
  type sanitizing, one tool per (path, method)
- **Declarations**: snake_case names (at most 60 characters) and a JSON
  Schema parameter contract per tool
- **Invocation**: HTTP requests built from tool arguments; errors are
  returned to the agent instead of raised
- **Auth**: API key, HTTP, OAuth2 and OpenID Connect schemes with a
  per-context credential cache, token refresh and user authorization

Quick Start:
    >>> from restwright import OpenAPIToolset, ToolContext
    >>>
    >>> toolset = OpenAPIToolset(spec_dict=spec)
    >>> tool = toolset.get_tool("get_user")
    >>> result = await tool.invoke({"user_id": "42"}, ToolContext())
"""

__version__ = "0.1.0"

from restwright.errors import (
    AuthConfigurationError,
    CredentialRefreshError,
    PollCancelledError,
    PollTimeoutError,
    RestwrightError,
    SpecLoadError,
    SpecResolutionError,
)
from restwright.openapi import OpenApiSpecParser, ParsedOperation
from restwright.tools import (
    OpenAPIToolset,
    RestApiTool,
    Tool,
    ToolContext,
    ToolFactory,
    ToolRegistry,
)

__all__ = [
    # Version info
    "__version__",
    # Compilation
    "OpenApiSpecParser",
    "ParsedOperation",
    # Tools
    "Tool",
    "RestApiTool",
    "ToolFactory",
    "OpenAPIToolset",
    "ToolContext",
    "ToolRegistry",
    # Errors
    "RestwrightError",
    "SpecLoadError",
    "SpecResolutionError",
    "AuthConfigurationError",
    "CredentialRefreshError",
    "PollTimeoutError",
    "PollCancelledError",
]
