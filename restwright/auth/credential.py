"""
Auth Credentials.

An auth credential is the *concrete* material that satisfies an auth
scheme: a token, an API key, OAuth2 client settings plus tokens, or a
service account.

AuthCredential is a tagged record: ``auth_type`` says which of the
optional sub-records (``http``, ``api_key``, ``oauth2``,
``service_account``) is meaningful.

Security:
    Credentials are plain pydantic models so they can be stored in the
    caller's state and serialized into cache keys. Never log them.

Usage:
    credential = AuthCredential(
        auth_type=AuthCredentialTypes.OAUTH2,
        oauth2=OAuth2Auth(client_id="id", client_secret="secret"),
    )
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .schemes import AuthScheme

# Tokens expiring within this window are treated as already expired
EXPIRY_SKEW_SECONDS = 300


class AuthCredentialTypes(str, Enum):
    """Kinds of credential, mirroring the scheme kinds."""

    API_KEY = "apiKey"
    HTTP = "http"
    OAUTH2 = "oauth2"
    OPEN_ID_CONNECT = "openIdConnect"
    SERVICE_ACCOUNT = "serviceAccount"


class _CredentialModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class HttpCredentials(_CredentialModel):
    username: str | None = None
    password: str | None = None
    token: str | None = None


class HttpAuth(_CredentialModel):
    scheme: str = "bearer"
    credentials: HttpCredentials = Field(default_factory=HttpCredentials)


class ApiKeyAuth(_CredentialModel):
    """API key value; location and name default to the scheme's."""

    value: str
    location: str | None = None
    name: str | None = None


class OAuth2Auth(_CredentialModel):
    """
    OAuth2 client settings and tokens.

    Attributes:
        expires_at: Access-token expiry as a Unix timestamp (seconds)
        auth_uri: Authorization URL presented to the user
        auth_response_uri: Redirect URL returned after the user consented
    """

    client_id: str | None = None
    client_secret: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = None
    expires_in: int | None = None
    token_type: str | None = None
    scope: str | None = None
    auth_uri: str | None = None
    auth_response_uri: str | None = None
    auth_code: str | None = None
    redirect_uri: str | None = None
    state: str | None = None
    token_endpoint_auth_method: str | None = None
    audience: str | None = None


class ServiceAccountCredential(_CredentialModel):
    type: str = "service_account"
    project_id: str
    private_key_id: str
    private_key: str
    client_email: str
    client_id: str
    auth_uri: str
    token_uri: str
    auth_provider_x509_cert_url: str | None = None
    client_x509_cert_url: str | None = None
    universe_domain: str | None = None


class ServiceAccount(_CredentialModel):
    service_account_credential: ServiceAccountCredential | None = None
    scopes: list[str] = Field(default_factory=list)
    use_default_credential: bool = False
    quota_project_id: str | None = None


class AuthCredential(_CredentialModel):
    auth_type: AuthCredentialTypes
    resource_ref: str | None = None
    http: HttpAuth | None = None
    api_key: ApiKeyAuth | None = None
    oauth2: OAuth2Auth | None = None
    service_account: ServiceAccount | None = None

    def to_json(self) -> str:
        """Stable JSON form, used for credential keys."""
        return self.model_dump_json(exclude_none=True)


class AuthConfig(BaseModel):
    """
    A request for credentials, registered with the caller's context.

    The caller completes the user-facing step (e.g. OAuth consent), then
    makes the resulting credential available under ``credential_key`` so
    the next invocation can pick it up.
    """

    auth_scheme: AuthScheme
    raw_auth_credential: AuthCredential | None = None
    exchanged_auth_credential: AuthCredential | None = None
    credential_key: str


def is_oauth2_expired(
    oauth2: OAuth2Auth,
    *,
    now: float | None = None,
    skew: int = EXPIRY_SKEW_SECONDS,
) -> bool:
    """
    Check whether an OAuth2 access token is (about to be) expired.

    A credential with no ``expires_at`` is never considered expired.
    """
    if oauth2.expires_at is None:
        return False
    current = time.time() if now is None else now
    return oauth2.expires_at <= current + skew


def update_credential_with_tokens(
    credential: AuthCredential,
    tokens: dict[str, Any],
    *,
    now: float | None = None,
) -> AuthCredential:
    """
    Return a copy of ``credential`` with fields from a token response.

    Args:
        credential: OAuth2 credential to update
        tokens: Token endpoint response (access_token, refresh_token, ...)
    """
    oauth2 = credential.oauth2.model_copy() if credential.oauth2 else OAuth2Auth()

    if tokens.get("access_token"):
        oauth2.access_token = tokens["access_token"]
    if tokens.get("refresh_token"):
        oauth2.refresh_token = tokens["refresh_token"]
    if tokens.get("expires_in") is not None:
        current = time.time() if now is None else now
        oauth2.expires_in = int(tokens["expires_in"])
        oauth2.expires_at = int(current) + oauth2.expires_in
    if tokens.get("token_type"):
        oauth2.token_type = tokens["token_type"]
    if tokens.get("scope"):
        oauth2.scope = tokens["scope"]

    return credential.model_copy(update={"oauth2": oauth2})
