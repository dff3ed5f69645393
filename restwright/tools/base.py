"""
Tool abstractions.

Anything an agent can call is a Tool: it declares itself to the model
layer (name, description, argument schema) and performs the call in an
async ``invoke``. Failures the agent could recover from are reported in
the returned dict, never raised.

ToolAnnotations carries behavioural hints (read-only, destructive, ...)
that an agent runtime may use to ask for confirmation before a call.

Usage:
    class EchoTool(Tool):
        @property
        def name(self) -> str:
            return "echo"

        @property
        def description(self) -> str:
            return "Echo the input back"

        @property
        def input_schema(self) -> dict:
            return {
                "type": "object",
                "properties": {"text": {"type": "string"}},
                "required": ["text"],
            }

        async def invoke(self, args, context):
            return {"text": args["text"]}
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .context import InvocationContext

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
_IDEMPOTENT_METHODS = _SAFE_METHODS | {"PUT", "DELETE"}


@dataclass(frozen=True, slots=True)
class ToolAnnotations:
    """
    Advisory hints about what a tool does to the outside world.

    Hints are never enforced. Do not base security decisions on them.

    Attributes:
        title: Display title
        read_only_hint: The call has no side effects
        destructive_hint: The call may delete or overwrite data
        idempotent_hint: Repeating the call with the same arguments changes nothing more
        open_world_hint: The call reaches systems outside the agent's control
    """

    title: str | None = None
    read_only_hint: bool = False
    destructive_hint: bool = True
    idempotent_hint: bool = False
    open_world_hint: bool = False

    @classmethod
    def for_http_method(cls, method: str, title: str | None = None) -> ToolAnnotations:
        """
        Hints implied by HTTP method semantics.

        Example:
            ToolAnnotations.for_http_method("delete").destructive_hint  # True
        """
        verb = method.upper()
        return cls(
            title=title,
            read_only_hint=verb in _SAFE_METHODS,
            destructive_hint=verb == "DELETE",
            idempotent_hint=verb in _IDEMPOTENT_METHODS,
            # Every REST call leaves the process
            open_world_hint=True,
        )

    def to_dict(self) -> dict[str, Any]:
        """camelCase form; hints equal to their defaults are omitted."""
        hints = {
            "title": self.title,
            "readOnlyHint": self.read_only_hint or None,
            "destructiveHint": False if not self.destructive_hint else None,
            "idempotentHint": self.idempotent_hint or None,
            "openWorldHint": self.open_world_hint or None,
        }
        return {key: value for key, value in hints.items() if value is not None}


class Tool(ABC):
    """
    A callable unit exposed to an agent.

    Subclasses provide ``name`` (snake_case, at most 60 characters),
    ``description``, ``input_schema`` and ``invoke``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name the model uses to call the tool."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """What the tool does; the model reads this to choose a tool."""
        ...

    @property
    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema (``type: object``) for the call arguments."""
        ...

    @abstractmethod
    async def invoke(self, args: dict[str, Any], context: InvocationContext) -> dict[str, Any]:
        """
        Perform the call.

        Args:
            args: Arguments matching ``input_schema``
            context: Caller-owned invocation context

        Returns:
            Result payload; recoverable failures come back as ``{"error": ...}``
        """
        ...

    @property
    def annotations(self) -> ToolAnnotations:
        return ToolAnnotations()

    def declaration(self) -> dict[str, Any]:
        """Function declaration handed to the model layer."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.input_schema,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
