"""
Exception hierarchy for restwright.

Compile-time failures (spec loading, reference resolution, auth
misconfiguration) are raised and abort tool construction.

Invocation-time failures (HTTP errors, network errors) are NOT raised.
They are returned inline as ``{"error": "..."}`` so the calling agent
can inspect them and decide whether to retry.
"""

from __future__ import annotations


class RestwrightError(Exception):
    """Base class for all restwright errors."""

    pass


class SpecLoadError(RestwrightError):
    """The OpenAPI document could not be loaded or decoded."""

    pass


class SpecResolutionError(RestwrightError):
    """
    A ``$ref`` could not be resolved.

    Raised for external references (anything not starting with ``#/``)
    and for local pointers that do not exist in the document.
    """

    def __init__(self, ref: str, reason: str):
        self.ref = ref
        self.reason = reason
        super().__init__(f"Cannot resolve $ref '{ref}': {reason}")


class AuthConfigurationError(RestwrightError):
    """An auth scheme is missing configuration required before any call."""

    pass


class CredentialRefreshError(RestwrightError):
    """An expired credential could not be refreshed."""

    pass


class PollTimeoutError(RestwrightError):
    """A long-running operation did not finish within its timeout."""

    def __init__(self, operation_name: str, timeout: float):
        self.operation_name = operation_name
        self.timeout = timeout
        super().__init__(f"{operation_name} did not complete within {timeout:.1f}s")


class PollCancelledError(RestwrightError):
    """A long-running wait was cancelled through its cancellation token."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        super().__init__(f"{operation_name} was cancelled")
