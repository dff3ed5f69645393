"""
Configuration for restwright.

- Settings: environment-backed runtime settings
- Feature flags: gates for experimental behaviour
"""

from .features import (
    FeatureName,
    FeatureStage,
    clear_all_feature_overrides,
    clear_feature_override,
    is_feature_enabled,
    override_feature_enabled,
)
from .settings import Settings, configure_logging, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "FeatureName",
    "FeatureStage",
    "is_feature_enabled",
    "override_feature_enabled",
    "clear_feature_override",
    "clear_all_feature_overrides",
]
