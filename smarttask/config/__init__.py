"""Configuration package."""

from .settings import (
    DevOpsSettings,
    GovernanceSettings,
    ModelSettings,
    ModelType,
    ObservabilitySettings,
    Settings,
    get_settings,
)

__all__ = [
    "DevOpsSettings",
    "GovernanceSettings",
    "ModelSettings",
    "ModelType",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
