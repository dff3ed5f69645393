"""
Auth helpers: turning a resolved credential into request parameters.

A credential is applied to a request as one extra ApiParameter plus its
value, so the RequestBuilder places it exactly like any other header,
query or cookie parameter.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import replace
from typing import Any

from restwright.openapi.common import ApiParameter, ParamLocation, create_api_parameter

from .credential import (
    AuthCredential,
    AuthCredentialTypes,
    HttpAuth,
    HttpCredentials,
)
from .schemes import (
    ApiKeyScheme,
    AuthScheme,
    AuthSchemeType,
    HttpScheme,
    OAuth2Scheme,
    OpenIdConnectScheme,
)

logger = logging.getLogger(__name__)

# Auth parameters never collide with operation parameters
AUTH_PARAM_PREFIX = "_auth_"


def get_scheme_type(auth_scheme: AuthScheme | None) -> AuthSchemeType | None:
    if auth_scheme is None:
        return None
    return AuthSchemeType(auth_scheme.type)


def external_exchange_required(credential: AuthCredential) -> bool:
    """OAuth2/OIDC credentials without an access token need user interaction."""
    return credential.auth_type in (
        AuthCredentialTypes.OAUTH2,
        AuthCredentialTypes.OPEN_ID_CONNECT,
    ) and not (credential.oauth2 and credential.oauth2.access_token)


def _auth_parameter(
    name: str, location: ParamLocation, description: str
) -> ApiParameter:
    param = create_api_parameter(
        name,
        location,
        {"type": "string"},
        description=description,
    )
    return replace(param, py_name=f"{AUTH_PARAM_PREFIX}{param.py_name}")


def _api_key_to_param(
    scheme: ApiKeyScheme, credential: AuthCredential
) -> tuple[ApiParameter, dict[str, Any]] | None:
    if credential.api_key is None:
        return None
    location = ParamLocation(credential.api_key.location or scheme.in_)
    name = credential.api_key.name or scheme.name
    param = _auth_parameter(name, location, "API key")
    return param, {param.py_name: credential.api_key.value}


def _http_to_param(
    scheme: HttpScheme, credential: AuthCredential
) -> tuple[ApiParameter, dict[str, Any]] | None:
    if credential.http is None:
        return None

    scheme_name = (scheme.scheme or credential.http.scheme or "bearer").lower()
    creds = credential.http.credentials

    if scheme_name == "basic":
        if not (creds.username and creds.password):
            return None
        encoded = base64.b64encode(f"{creds.username}:{creds.password}".encode()).decode()
        header_value = f"Basic {encoded}"
    elif not creds.token:
        return None
    elif scheme_name == "bearer":
        header_value = f"Bearer {creds.token}"
    else:
        header_value = f"{scheme_name} {creds.token}"

    param = _auth_parameter("Authorization", ParamLocation.HEADER, "HTTP Authorization header")
    return param, {param.py_name: header_value}


def _oauth2_to_param(
    credential: AuthCredential,
) -> tuple[ApiParameter, dict[str, Any]] | None:
    if credential.oauth2 is None or not credential.oauth2.access_token:
        return None
    token_type = credential.oauth2.token_type or "Bearer"
    param = _auth_parameter("Authorization", ParamLocation.HEADER, "OAuth2 Authorization header")
    return param, {param.py_name: f"{token_type} {credential.oauth2.access_token}"}


def credential_to_param(
    auth_scheme: AuthScheme | None,
    auth_credential: AuthCredential | None,
) -> tuple[ApiParameter, dict[str, Any]] | None:
    """
    Convert a credential into an auth parameter and its argument value.

    Returns:
        ``(parameter, {py_name: value})`` or None when the credential does
        not carry what the scheme needs
    """
    if auth_scheme is None or auth_credential is None:
        return None

    if isinstance(auth_scheme, ApiKeyScheme):
        return _api_key_to_param(auth_scheme, auth_credential)
    if isinstance(auth_scheme, HttpScheme):
        return _http_to_param(auth_scheme, auth_credential)
    if isinstance(auth_scheme, (OAuth2Scheme, OpenIdConnectScheme)):
        return _oauth2_to_param(auth_credential)

    logger.warning(f"[auth_helpers] Unsupported auth scheme type: {auth_scheme.type}")
    return None


def token_to_scheme_credential(
    token: str, token_type: str = "Bearer"
) -> tuple[HttpScheme, AuthCredential]:
    """
    Build an HTTP scheme/credential pair from a raw token.

    Example:
        scheme, credential = token_to_scheme_credential("abc123")
        toolset = OpenAPIToolset(spec_dict=spec, auth_scheme=scheme, auth_credential=credential)
    """
    scheme_name = token_type.lower()
    return (
        HttpScheme(scheme=scheme_name),
        AuthCredential(
            auth_type=AuthCredentialTypes.HTTP,
            http=HttpAuth(scheme=scheme_name, credentials=HttpCredentials(token=token)),
        ),
    )
