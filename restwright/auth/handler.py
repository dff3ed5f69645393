"""
Tool Auth Handler.

Decides, before each REST call, whether usable credentials exist:

1. No auth scheme: nothing to do.
2. Look up an exchanged credential cached for this (scheme, credential)
   pair; fall back to the credential the tool was configured with.
3. An expired OAuth2 credential is refreshed once. A failed refresh
   means the credential is treated as absent.
4. If the credential is absent or still needs a user-facing exchange,
   take the caller's authorization response when one is available.
   Otherwise validate the client settings, register an authorization
   request with the context and report ``pending``.

Usage:
    handler = ToolAuthHandler.from_tool_context(context, scheme, credential)
    result = await handler.prepare_auth_credentials()
    if result.state == AuthPreparationState.PENDING:
        return {"pending": True, ...}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from restwright.errors import AuthConfigurationError, CredentialRefreshError

from .credential import AuthConfig, AuthCredential, AuthCredentialTypes
from .helpers import external_exchange_required, get_scheme_type
from .refresher import CredentialRefresherRegistry
from .schemes import AuthScheme, AuthSchemeType
from .store import AUTH_RESPONSE_PREFIX, CredentialStore, auth_request_key, load_credential

if TYPE_CHECKING:
    from restwright.tools.context import InvocationContext

logger = logging.getLogger(__name__)


class AuthPreparationState(str, Enum):
    PENDING = "pending"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class AuthPreparationResult:
    """
    Outcome of credential preparation.

    ``auth_credential`` is the credential to apply to the request when
    ``state`` is DONE; it may be None when the operation needs no auth.
    """

    state: AuthPreparationState
    auth_scheme: AuthScheme | None = None
    auth_credential: AuthCredential | None = None


class ToolAuthHandler:
    """Runs the credential state machine for a single invocation."""

    def __init__(
        self,
        context: InvocationContext,
        auth_scheme: AuthScheme | None,
        auth_credential: AuthCredential | None,
        *,
        credential_store: CredentialStore | None = None,
        refresher_registry: CredentialRefresherRegistry | None = None,
    ):
        self._context = context
        self._auth_scheme = auth_scheme
        self._auth_credential = auth_credential.model_copy(deep=True) if auth_credential else None
        self._store = credential_store or CredentialStore(context)
        self._refreshers = refresher_registry or CredentialRefresherRegistry.default()

    @classmethod
    def from_tool_context(
        cls,
        context: InvocationContext,
        auth_scheme: AuthScheme | None,
        auth_credential: AuthCredential | None,
        *,
        refresher_registry: CredentialRefresherRegistry | None = None,
    ) -> ToolAuthHandler:
        return cls(
            context,
            auth_scheme,
            auth_credential,
            credential_store=CredentialStore(context),
            refresher_registry=refresher_registry,
        )

    async def prepare_auth_credentials(self) -> AuthPreparationResult:
        if self._auth_scheme is None:
            return AuthPreparationResult(state=AuthPreparationState.DONE)

        credential = await self._get_existing_credential()

        if credential is None or external_exchange_required(credential):
            credential = self._get_auth_response()
            if credential is not None:
                key = self._store.get_credential_key(self._auth_scheme, self._auth_credential)
                self._store.store_credential(key, credential)
                # An authorization response is consumed once
                self._context.state.pop(f"{AUTH_RESPONSE_PREFIX}{self._auth_config().credential_key}", None)
            else:
                self._request_credential()
                return AuthPreparationResult(
                    state=AuthPreparationState.PENDING,
                    auth_scheme=self._auth_scheme,
                    auth_credential=self._auth_credential,
                )

        return AuthPreparationResult(
            state=AuthPreparationState.DONE,
            auth_scheme=self._auth_scheme,
            auth_credential=credential,
        )

    async def _get_existing_credential(self) -> AuthCredential | None:
        cached = self._store.get_credential(self._auth_scheme, self._auth_credential)
        credential = cached or self._auth_credential
        if credential is None:
            return None

        refresher = self._refreshers.get_refresher(credential.auth_type)
        if refresher is None or not refresher.is_refresh_needed(credential, self._auth_scheme):
            return credential

        try:
            refreshed = await refresher.refresh(credential, self._auth_scheme)
        except CredentialRefreshError as e:
            logger.warning(f"[tool_auth] Credential refresh failed, re-requesting authorization: {e}")
            return None

        key = self._store.get_credential_key(self._auth_scheme, self._auth_credential)
        self._store.store_credential(key, refreshed)
        return refreshed

    def _auth_config(self) -> AuthConfig:
        return AuthConfig(
            auth_scheme=self._auth_scheme,
            raw_auth_credential=self._auth_credential,
            credential_key=auth_request_key(self._auth_scheme, self._auth_credential),
        )

    def _get_auth_response(self) -> AuthCredential | None:
        return load_credential(self._context.get_auth_response(self._auth_config()))

    def _request_credential(self) -> None:
        scheme_type = get_scheme_type(self._auth_scheme)
        if scheme_type in (AuthSchemeType.OAUTH2, AuthSchemeType.OPEN_ID_CONNECT):
            oauth2 = self._auth_credential.oauth2 if self._auth_credential else None
            if (
                self._auth_credential is None
                or self._auth_credential.auth_type
                not in (AuthCredentialTypes.OAUTH2, AuthCredentialTypes.OPEN_ID_CONNECT)
                or oauth2 is None
                or not oauth2.client_id
                or not oauth2.client_secret
            ):
                raise AuthConfigurationError(
                    f"{scheme_type.value} auth scheme requires an auth credential "
                    "with client_id and client_secret"
                )

        logger.info(f"[tool_auth] Requesting user authorization for {scheme_type.value} scheme")
        self._context.request_credential(self._auth_config())
