"""
Tool Registry.

Gathers tools from one or more toolsets into a single name -> tool map,
so an agent can dispatch model function calls and hand the full set of
declarations to the model layer.

Usage:
    registry = ToolRegistry()
    registry.register_all(OpenAPIToolset(spec_dict=petstore).get_tools())
    registry.register(my_custom_tool)

    tool = registry.get_required("list_pets")
    declarations = registry.to_declarations()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from restwright.errors import RestwrightError

if TYPE_CHECKING:
    from .base import Tool

logger = logging.getLogger(__name__)


class ToolRegistryError(RestwrightError):
    """A tool could not be registered or looked up."""

    pass


class ToolRegistry:
    """Name-keyed collection of tools, kept in registration order."""

    def __init__(self) -> None:
        self._by_name: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """
        Add a tool.

        Raises:
            ToolRegistryError: The name is already taken, or the tool's
                declaration cannot be handed to a model
        """
        self._check_declarable(tool)
        if tool.name in self._by_name:
            raise ToolRegistryError(
                f"Tool name '{tool.name}' is already registered; "
                "use a toolset name prefix to disambiguate"
            )
        self._by_name[tool.name] = tool
        logger.debug(f"[tool_registry] Added {tool.name}")

    def register_all(self, tools: Iterable[Tool]) -> None:
        count = 0
        for tool in tools:
            self.register(tool)
            count += 1
        logger.info(f"[tool_registry] Added {count} tools ({len(self)} total)")

    def unregister(self, name: str) -> bool:
        """Remove a tool; returns False when nothing had that name."""
        removed = self._by_name.pop(name, None)
        if removed is not None:
            logger.debug(f"[tool_registry] Removed {name}")
        return removed is not None

    def get(self, name: str) -> Tool | None:
        return self._by_name.get(name)

    def get_required(self, name: str) -> Tool:
        """
        Look up a tool the model asked for.

        Raises:
            ToolRegistryError: No tool has that name
        """
        if name not in self._by_name:
            raise ToolRegistryError(
                f"Unknown tool '{name}'. Registered: {self.list_names()}"
            )
        return self._by_name[name]

    def list_tools(self) -> list[Tool]:
        return list(self)

    def list_names(self) -> list[str]:
        return list(self._by_name)

    def to_declarations(self) -> list[dict[str, Any]]:
        """Function declarations of all registered tools, in registration order."""
        return [tool.declaration() for tool in self]

    @staticmethod
    def _check_declarable(tool: Tool) -> None:
        # Model function-calling APIs need a name and an object schema
        if not isinstance(tool.name, str) or not tool.name:
            raise ToolRegistryError(f"Cannot register {tool!r}: empty tool name")
        schema = tool.input_schema
        if not isinstance(schema, dict) or schema.get("type") != "object":
            raise ToolRegistryError(
                f"Cannot register '{tool.name}': input_schema must be an object schema"
            )
        if not isinstance(schema.get("properties"), dict):
            raise ToolRegistryError(
                f"Cannot register '{tool.name}': input_schema has no properties map"
            )

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"ToolRegistry(tools={self.list_names()})"
