"""
Invocation Context.

Every tool call receives a caller-owned context. Tools depend only on
the InvocationContext protocol:

- ``state``: mutable mapping where exchanged credentials are cached
- ``request_credential(auth_config)``: register an authorization request
- ``get_auth_response(auth_config)``: credential the caller obtained after
  the user completed an authorization request, if any

ToolContext is a ready-made in-memory implementation. Authorization
responses are placed in ``state`` under ``temp:<credential_key>``, which
is how a caller hands the result of an OAuth consent back to the tool.

Usage:
    context = ToolContext(user_id="user-123")
    result = await tool.invoke({"user_id": "42"}, context)
    if result.get("pending"):
        config = next(iter(context.requested_auth_configs.values()))
        credential = await run_oauth_consent(config.auth_scheme, config.raw_auth_credential)
        context.set_auth_response(config.credential_key, credential)
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from restwright.auth.credential import AuthConfig, AuthCredential
from restwright.auth.store import AUTH_RESPONSE_PREFIX


@runtime_checkable
class InvocationContext(Protocol):
    """Capabilities a tool needs from its caller."""

    @property
    def state(self) -> MutableMapping[str, Any]: ...

    def request_credential(self, auth_config: AuthConfig) -> None: ...

    def get_auth_response(self, auth_config: AuthConfig) -> AuthCredential | dict[str, Any] | None: ...


@dataclass
class ToolContext:
    """
    In-memory invocation context.

    Attributes:
        user_id: Unique identifier for the user/tenant
        state: Caller-owned storage (credential cache, auth responses)
        metadata: Additional context available to header providers
        request_headers: Per-request headers added to the outgoing call
        requested_auth_configs: Authorization requests registered by tools
    """

    user_id: str = "anonymous"
    state: MutableMapping[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    request_headers: dict[str, str] = field(default_factory=dict)
    requested_auth_configs: dict[str, AuthConfig] = field(default_factory=dict)

    def request_credential(self, auth_config: AuthConfig) -> None:
        self.requested_auth_configs[auth_config.credential_key] = auth_config

    def get_auth_response(self, auth_config: AuthConfig) -> AuthCredential | dict[str, Any] | None:
        return self.state.get(f"{AUTH_RESPONSE_PREFIX}{auth_config.credential_key}")

    def set_auth_response(self, credential_key: str, credential: AuthCredential) -> None:
        """Hand back the credential obtained for an authorization request."""
        self.state[f"{AUTH_RESPONSE_PREFIX}{credential_key}"] = credential.model_dump(
            mode="json", exclude_none=True
        )
        self.requested_auth_configs.pop(credential_key, None)
