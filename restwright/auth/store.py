"""
Credential Store.

Exchanged credentials are cached in the caller's context state so that a
credential obtained once (e.g. after OAuth consent) is reused by every
later invocation that shares the same scheme and raw credential.

The caller owns the storage medium (``context.state``); this module only
derives keys and converts between AuthCredential and the JSON-friendly
form kept in state.
"""

from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING, Any

from .credential import AuthCredential
from .helpers import get_scheme_type
from .schemes import AuthScheme

if TYPE_CHECKING:
    from restwright.tools.context import InvocationContext

logger = logging.getLogger(__name__)

CREDENTIAL_KEY_SUFFIX = "existing_exchanged_credential"

# State prefix for authorization responses handed back by the caller
AUTH_RESPONSE_PREFIX = "temp:"


def _fingerprint(auth_scheme: AuthScheme | None, auth_credential: AuthCredential | None) -> str:
    scheme_json = auth_scheme.to_json() if auth_scheme is not None else ""
    credential_json = auth_credential.to_json() if auth_credential is not None else ""
    digest = hashlib.sha256(f"{scheme_json}|{credential_json}".encode()).hexdigest()
    return digest[:32]


def credential_key(
    auth_scheme: AuthScheme | None,
    auth_credential: AuthCredential | None,
) -> str:
    """
    Deterministic cache key for a (scheme, raw credential) pair.

    The key embeds the scheme and credential kinds for readability and a
    digest of both serialized models, so secrets never appear in key names.
    """
    scheme_type = get_scheme_type(auth_scheme)
    scheme_part = scheme_type.value if scheme_type else ""
    credential_part = auth_credential.auth_type.value if auth_credential else ""
    return (
        f"{scheme_part}_{credential_part}_"
        f"{_fingerprint(auth_scheme, auth_credential)}_{CREDENTIAL_KEY_SUFFIX}"
    )


def auth_request_key(
    auth_scheme: AuthScheme | None,
    auth_credential: AuthCredential | None,
) -> str:
    """Key under which an authorization request/response is exchanged."""
    return f"openapi_auth_{_fingerprint(auth_scheme, auth_credential)}"


def load_credential(value: Any) -> AuthCredential | None:
    """Convert a value read from state back into an AuthCredential."""
    if value is None:
        return None
    if isinstance(value, AuthCredential):
        return value
    if isinstance(value, dict):
        return AuthCredential.model_validate(value)
    logger.warning(f"[credential_store] Ignoring unexpected state value of type {type(value).__name__}")
    return None


class CredentialStore:
    """
    Reads and writes exchanged credentials in a context's state.

    Example:
        store = CredentialStore(context)
        key = store.get_credential_key(scheme, raw_credential)
        store.store_credential(key, exchanged)
        assert store.get_credential(scheme, raw_credential) == exchanged
    """

    def __init__(self, context: InvocationContext):
        self._context = context

    def get_credential_key(
        self,
        auth_scheme: AuthScheme | None,
        auth_credential: AuthCredential | None,
    ) -> str:
        return credential_key(auth_scheme, auth_credential)

    def get_credential(
        self,
        auth_scheme: AuthScheme | None,
        auth_credential: AuthCredential | None,
    ) -> AuthCredential | None:
        key = self.get_credential_key(auth_scheme, auth_credential)
        return load_credential(self._context.state.get(key))

    def store_credential(self, key: str, auth_credential: AuthCredential) -> None:
        self._context.state[key] = auth_credential.model_dump(mode="json", exclude_none=True)
        logger.debug(f"[credential_store] Stored credential under {key[:24]}...")

    def remove_credential(self, key: str) -> None:
        self._context.state.pop(key, None)
