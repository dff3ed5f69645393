"""
Auth Schemes.

An auth scheme is the *declared* mechanism an API expects, taken from
``components.securitySchemes``. The four OpenAPI scheme kinds are modelled
as pydantic models discriminated on ``type``:

- HttpScheme: ``http`` with ``scheme`` (bearer, basic, ...)
- ApiKeyScheme: ``apiKey`` sent in a query param, header or cookie
- OAuth2Scheme: ``oauth2`` with one or more flows
- OpenIdConnectScheme: ``openIdConnect`` (optionally with discovered endpoints)

Field names are snake_case in Python and camelCase on the wire
(``tokenUrl``, ``openIdConnectUrl``); both spellings are accepted.

Usage:
    scheme = dict_to_auth_scheme({"type": "apiKey", "in": "header", "name": "X-Key"})
    assert isinstance(scheme, ApiKeyScheme)
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class AuthSchemeType(str, Enum):
    """OpenAPI security scheme types."""

    API_KEY = "apiKey"
    HTTP = "http"
    OAUTH2 = "oauth2"
    OPEN_ID_CONNECT = "openIdConnect"


class _SchemeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    description: str | None = None

    def to_json(self) -> str:
        """Stable JSON form, used for credential keys."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class HttpScheme(_SchemeModel):
    type: Literal["http"] = "http"
    scheme: str = "bearer"
    bearer_format: str | None = Field(default=None, alias="bearerFormat")


class ApiKeyScheme(_SchemeModel):
    type: Literal["apiKey"] = "apiKey"
    name: str
    in_: Literal["query", "header", "cookie"] = Field(alias="in")


class OAuthFlow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    authorization_url: str | None = Field(default=None, alias="authorizationUrl")
    token_url: str | None = Field(default=None, alias="tokenUrl")
    refresh_url: str | None = Field(default=None, alias="refreshUrl")
    scopes: dict[str, str] = Field(default_factory=dict)


class OAuthFlows(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = Field(default=None, alias="clientCredentials")
    authorization_code: OAuthFlow | None = Field(default=None, alias="authorizationCode")


class OAuth2Scheme(_SchemeModel):
    type: Literal["oauth2"] = "oauth2"
    flows: OAuthFlows = Field(default_factory=OAuthFlows)

    @property
    def refresh_endpoint(self) -> str | None:
        """Endpoint for the refresh_token grant (refreshUrl, else tokenUrl)."""
        for flow in (
            self.flows.authorization_code,
            self.flows.client_credentials,
            self.flows.password,
        ):
            if flow is not None and flow.token_url:
                return flow.refresh_url or flow.token_url
        return None


class OpenIdConnectScheme(_SchemeModel):
    type: Literal["openIdConnect"] = "openIdConnect"
    open_id_connect_url: str | None = Field(default=None, alias="openIdConnectUrl")
    # Populated from the discovery document when known
    authorization_endpoint: str | None = None
    token_endpoint: str | None = None
    scopes: list[str] = Field(default_factory=list)

    @property
    def refresh_endpoint(self) -> str | None:
        return self.token_endpoint


AuthScheme = Annotated[
    Union[HttpScheme, ApiKeyScheme, OAuth2Scheme, OpenIdConnectScheme],
    Field(discriminator="type"),
]

_AUTH_SCHEME_ADAPTER: TypeAdapter[Any] = TypeAdapter(AuthScheme)

SUPPORTED_SCHEME_TYPES = frozenset(t.value for t in AuthSchemeType)


def dict_to_auth_scheme(data: dict[str, Any]) -> AuthScheme:
    """
    Narrow a raw ``securitySchemes`` entry into an AuthScheme.

    Raises:
        pydantic.ValidationError: Unknown type or missing required fields
    """
    return _AUTH_SCHEME_ADAPTER.validate_python(data)
