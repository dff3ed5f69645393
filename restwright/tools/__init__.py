"""
Restwright Tools.

Tools are the callable units handed to an agent. Each RestApiTool wraps
one OpenAPI operation; OpenAPIToolset builds them from a specification.

Usage:
    toolset = OpenAPIToolset(spec_dict=spec)
    registry = ToolRegistry()
    registry.register_all(toolset.get_tools())

    result = await registry.get("get_user").invoke({"user_id": "42"}, ToolContext())
"""

from .base import Tool, ToolAnnotations
from .context import InvocationContext, ToolContext
from .factory import ToolFactory, prefixed_tool_name
from .registry import ToolRegistry, ToolRegistryError
from .rest_api_tool import HeaderProvider, RestApiTool, to_structured_schema
from .toolset import OpenAPIToolset, load_spec_str

__all__ = [
    # Core Tool Protocol
    "Tool",
    "ToolAnnotations",
    "ToolRegistry",
    "ToolRegistryError",
    # Invocation
    "InvocationContext",
    "ToolContext",
    # REST tools
    "RestApiTool",
    "HeaderProvider",
    "to_structured_schema",
    "ToolFactory",
    "prefixed_tool_name",
    "OpenAPIToolset",
    "load_spec_str",
]
