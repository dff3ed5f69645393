"""
Credential Refreshers.

A refresher renews an expired credential without user interaction. The
only built-in refresher handles OAuth2/OIDC credentials by calling the
scheme's token endpoint with the ``refresh_token`` grant.

Refreshers raise CredentialRefreshError when renewal is impossible;
ToolAuthHandler then treats the credential as absent and asks the user
to authorize again.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from restwright.errors import CredentialRefreshError

from .credential import (
    AuthCredential,
    AuthCredentialTypes,
    is_oauth2_expired,
    update_credential_with_tokens,
)
from .schemes import AuthScheme, OAuth2Scheme, OpenIdConnectScheme

logger = logging.getLogger(__name__)


class BaseCredentialRefresher(ABC):
    """Abstract base for credential refreshers."""

    @abstractmethod
    def is_refresh_needed(
        self,
        auth_credential: AuthCredential,
        auth_scheme: AuthScheme | None = None,
    ) -> bool:
        """Whether ``auth_credential`` should be refreshed before use."""
        ...

    @abstractmethod
    async def refresh(
        self,
        auth_credential: AuthCredential,
        auth_scheme: AuthScheme | None = None,
    ) -> AuthCredential:
        """
        Return a renewed copy of ``auth_credential``.

        Raises:
            CredentialRefreshError: Renewal failed
        """
        ...


class OAuth2CredentialRefresher(BaseCredentialRefresher):
    """
    Refreshes OAuth2/OIDC access tokens using the refresh_token grant.

    Example:
        refresher = OAuth2CredentialRefresher()
        if refresher.is_refresh_needed(credential, scheme):
            credential = await refresher.refresh(credential, scheme)
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._client = http_client
        self._timeout = timeout

    def is_refresh_needed(
        self,
        auth_credential: AuthCredential,
        auth_scheme: AuthScheme | None = None,
    ) -> bool:
        oauth2 = auth_credential.oauth2
        if oauth2 is None or not oauth2.access_token:
            return False
        return is_oauth2_expired(oauth2)

    async def refresh(
        self,
        auth_credential: AuthCredential,
        auth_scheme: AuthScheme | None = None,
    ) -> AuthCredential:
        oauth2 = auth_credential.oauth2
        if oauth2 is None or not oauth2.refresh_token:
            raise CredentialRefreshError("No refresh token available")

        if not isinstance(auth_scheme, (OAuth2Scheme, OpenIdConnectScheme)):
            raise CredentialRefreshError("Refresh requires an OAuth2 or OpenID Connect scheme")

        endpoint = auth_scheme.refresh_endpoint
        if not endpoint:
            raise CredentialRefreshError("Auth scheme declares no token endpoint")

        data: dict[str, Any] = {
            "grant_type": "refresh_token",
            "refresh_token": oauth2.refresh_token,
        }
        auth: tuple[str, str] | None = None
        if oauth2.token_endpoint_auth_method == "client_secret_basic":
            auth = (oauth2.client_id or "", oauth2.client_secret or "")
        else:
            if oauth2.client_id:
                data["client_id"] = oauth2.client_id
            if oauth2.client_secret:
                data["client_secret"] = oauth2.client_secret

        logger.info(f"[oauth2_refresher] Refreshing access token via {endpoint}")

        try:
            tokens = await self._post(endpoint, data, auth)
        except httpx.HTTPError as e:
            logger.warning(f"[oauth2_refresher] Token refresh failed: {e}")
            raise CredentialRefreshError(f"Token refresh failed: {e}") from e
        except ValueError as e:
            raise CredentialRefreshError(f"Token endpoint returned invalid JSON: {e}") from e

        if not isinstance(tokens, dict) or not tokens.get("access_token"):
            raise CredentialRefreshError("Token endpoint response has no access_token")

        return update_credential_with_tokens(auth_credential, tokens)

    async def _post(
        self,
        endpoint: str,
        data: dict[str, Any],
        auth: tuple[str, str] | None,
    ) -> Any:
        if self._client is not None:
            response = await self._client.post(endpoint, data=data, auth=auth)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(endpoint, data=data, auth=auth)
            response.raise_for_status()
            return response.json()


class CredentialRefresherRegistry:
    """Maps credential types to the refresher that renews them."""

    def __init__(self) -> None:
        self._refreshers: dict[AuthCredentialTypes, BaseCredentialRefresher] = {}

    def register(
        self,
        credential_type: AuthCredentialTypes,
        refresher: BaseCredentialRefresher,
    ) -> None:
        self._refreshers[credential_type] = refresher

    def get_refresher(
        self, credential_type: AuthCredentialTypes
    ) -> BaseCredentialRefresher | None:
        return self._refreshers.get(credential_type)

    @classmethod
    def default(cls) -> CredentialRefresherRegistry:
        registry = cls()
        oauth2 = OAuth2CredentialRefresher()
        registry.register(AuthCredentialTypes.OAUTH2, oauth2)
        registry.register(AuthCredentialTypes.OPEN_ID_CONNECT, oauth2)
        return registry
