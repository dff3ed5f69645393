"""
Authentication for REST tools.

- Schemes: what an API declares (``components.securitySchemes``)
- Credentials: what the caller supplies to satisfy a scheme
- ToolAuthHandler: per-invocation credential state machine
  (cache lookup, OAuth2 refresh, authorization requests)
"""

from .credential import (
    ApiKeyAuth,
    AuthConfig,
    AuthCredential,
    AuthCredentialTypes,
    HttpAuth,
    HttpCredentials,
    OAuth2Auth,
    ServiceAccount,
    ServiceAccountCredential,
    is_oauth2_expired,
    update_credential_with_tokens,
)
from .handler import AuthPreparationResult, AuthPreparationState, ToolAuthHandler
from .helpers import credential_to_param, token_to_scheme_credential
from .refresher import (
    BaseCredentialRefresher,
    CredentialRefresherRegistry,
    OAuth2CredentialRefresher,
)
from .schemes import (
    ApiKeyScheme,
    AuthScheme,
    AuthSchemeType,
    HttpScheme,
    OAuth2Scheme,
    OAuthFlow,
    OAuthFlows,
    OpenIdConnectScheme,
    dict_to_auth_scheme,
)
from .store import CredentialStore

__all__ = [
    # Schemes
    "AuthScheme",
    "AuthSchemeType",
    "ApiKeyScheme",
    "HttpScheme",
    "OAuth2Scheme",
    "OAuthFlow",
    "OAuthFlows",
    "OpenIdConnectScheme",
    "dict_to_auth_scheme",
    # Credentials
    "AuthCredential",
    "AuthCredentialTypes",
    "AuthConfig",
    "ApiKeyAuth",
    "HttpAuth",
    "HttpCredentials",
    "OAuth2Auth",
    "ServiceAccount",
    "ServiceAccountCredential",
    "is_oauth2_expired",
    "update_credential_with_tokens",
    # Helpers
    "credential_to_param",
    "token_to_scheme_credential",
    # Runtime
    "CredentialStore",
    "BaseCredentialRefresher",
    "OAuth2CredentialRefresher",
    "CredentialRefresherRegistry",
    "ToolAuthHandler",
    "AuthPreparationResult",
    "AuthPreparationState",
]
