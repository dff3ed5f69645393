"""
Feature Flags.

Experimental behaviours are gated by named flags. Resolution order:

1. Programmatic override (``override_feature_enabled``)
2. Environment: ``RESTWRIGHT_ENABLE_<NAME>`` / ``RESTWRIGHT_DISABLE_<NAME>``
3. Registry default

Usage:
    if is_feature_enabled(FeatureName.JSON_SCHEMA_FOR_FUNC_DECL):
        ...

    # In tests
    override_feature_enabled(FeatureName.JSON_SCHEMA_FOR_FUNC_DECL, True)
    ...
    clear_all_feature_overrides()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")


class FeatureName(str, Enum):
    """Registered feature flags."""

    JSON_SCHEMA_FOR_FUNC_DECL = "JSON_SCHEMA_FOR_FUNC_DECL"


class FeatureStage(str, Enum):
    """Lifecycle stage of a feature."""

    WIP = "wip"
    EXPERIMENTAL = "experimental"
    STABLE = "stable"


@dataclass(frozen=True, slots=True)
class FeatureConfig:
    stage: FeatureStage
    default_on: bool


_REGISTRY: dict[FeatureName, FeatureConfig] = {
    FeatureName.JSON_SCHEMA_FOR_FUNC_DECL: FeatureConfig(
        stage=FeatureStage.WIP,
        default_on=False,
    ),
}

_OVERRIDES: dict[FeatureName, bool] = {}
_WARNED: set[FeatureName] = set()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def is_feature_enabled(feature: FeatureName) -> bool:
    """
    Check whether a feature is enabled.

    Raises:
        KeyError: If the feature is not registered
    """
    if feature not in _REGISTRY:
        raise KeyError(f"Feature {feature.value} is not registered")

    config = _REGISTRY[feature]

    if feature in _OVERRIDES:
        enabled = _OVERRIDES[feature]
    elif _env_flag(f"RESTWRIGHT_ENABLE_{feature.value}"):
        enabled = True
    elif _env_flag(f"RESTWRIGHT_DISABLE_{feature.value}"):
        enabled = False
    else:
        enabled = config.default_on

    if enabled and config.stage is not FeatureStage.STABLE and feature not in _WARNED:
        _WARNED.add(feature)
        logger.warning(
            f"[features] {feature.value} is {config.stage.value}; behaviour may change"
        )

    return enabled


def override_feature_enabled(feature: FeatureName, enabled: bool) -> None:
    """Force a feature on or off. Takes priority over the environment."""
    if feature not in _REGISTRY:
        raise KeyError(f"Feature {feature.value} is not registered")
    _OVERRIDES[feature] = enabled


def clear_feature_override(feature: FeatureName) -> None:
    _OVERRIDES.pop(feature, None)


def clear_all_feature_overrides() -> None:
    """Drop every programmatic override. Useful for testing."""
    _OVERRIDES.clear()
