"""
Runtime Settings for restwright.

Settings are a pydantic model populated from ``RESTWRIGHT_*`` environment
variables. Nothing here is required: every field has a usable default,
so tools can be built and invoked without any environment at all.

Usage:
    settings = get_settings()
    timeout = settings.request_timeout

    # In tests, build settings directly
    settings = Settings(request_timeout=1.0, ssl_verify=False)
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """
    Settings shared by the compiler and the invocation engine.

    Attributes:
        request_timeout: HTTP timeout (seconds) for tool calls and spec fetches
        ssl_verify: Default TLS verification for per-call HTTP clients
        user_agent_prefix: Product token used in the fixed User-Agent header
        log_level: Level passed to configure_logging()
        poll_interval: Seconds between polls of long-running operations
        poll_timeout: Upper bound (seconds) for a long-running wait
    """

    model_config = ConfigDict(extra="forbid")

    request_timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")
    ssl_verify: bool = Field(True, description="Verify TLS certificates")
    user_agent_prefix: str = Field("restwright", description="User-Agent product token")
    log_level: str = Field("INFO", description="Logging level name")
    poll_interval: float = Field(1.0, gt=0, description="Poll interval in seconds")
    poll_timeout: float = Field(300.0, gt=0, description="Poll timeout in seconds")


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings from the environment.

    Uses lru_cache for singleton pattern. Call ``get_settings.cache_clear()``
    after changing the environment in tests.
    """
    return Settings(
        request_timeout=float(os.getenv("RESTWRIGHT_REQUEST_TIMEOUT", "30")),
        ssl_verify=_env_bool("RESTWRIGHT_SSL_VERIFY", True),
        user_agent_prefix=os.getenv("RESTWRIGHT_USER_AGENT_PREFIX", "restwright"),
        log_level=os.getenv("RESTWRIGHT_LOG_LEVEL", "INFO"),
        poll_interval=float(os.getenv("RESTWRIGHT_POLL_INTERVAL", "1")),
        poll_timeout=float(os.getenv("RESTWRIGHT_POLL_TIMEOUT", "300")),
    )


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging for scripts and examples.

    Library code never calls this; it only creates module loggers.
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)
