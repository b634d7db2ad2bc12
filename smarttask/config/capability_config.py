"""Capability configuration loader."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Set

import yaml

from smarttask.capabilities.registry import CapabilityMeta

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("capabilities.yaml")


class CapabilityConfig:
    """Capability configuration manager."""

    def __init__(self, config_path: Path):
        """Load capability configuration from YAML file.

        Args:
            config_path: Path to capabilities.yaml
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> dict:
        if not self.config_path.exists():
            LOGGER.warning(f"Capabilities config not found: {self.config_path}, using defaults")
            return self._default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            LOGGER.error(f"Failed to load capabilities config: {e}, using defaults")
            return self._default_config()

        LOGGER.info(f"Loaded capabilities configuration from {self.config_path}")
        return config or {}

    def _default_config(self) -> dict:
        return {
            "core": {
                "read_file": {"category": "filesystem", "tags": ["read"]},
                "list_directory": {"category": "filesystem", "tags": ["read"]},
                "get_environment_variable": {"category": "execution", "tags": ["read"]},
                "get_pipeline_variable": {"category": "pipeline", "tags": ["read"]},
                "set_pipeline_variable": {"category": "pipeline", "tags": ["write", "decision"]},
                "execute_command": {"category": "execution", "tags": ["write", "execution"]},
            },
            "optional": {},
        }

    def get_core_capabilities(self) -> List[str]:
        core = self.config.get("core", {})
        if isinstance(core, dict):
            return list(core.keys())
        return core if isinstance(core, list) else []

    def get_enabled_optional_capabilities(self) -> List[str]:
        optional = self.config.get("optional", {}) or {}
        return [
            name for name, settings in optional.items()
            if isinstance(settings, dict) and settings.get("enabled", False)
        ]

    def get_all_enabled(self) -> Set[str]:
        """Core capabilities plus optional ones marked ``enabled: true``."""
        return set(self.get_core_capabilities()) | set(self.get_enabled_optional_capabilities())

    def is_enabled(self, name: str) -> bool:
        return name in self.get_all_enabled()

    def get_metadata(self, name: str) -> Optional[CapabilityMeta]:
        for section in ("core", "optional"):
            entries = self.config.get(section, {}) or {}
            if isinstance(entries, dict) and isinstance(entries.get(name), dict):
                entry = entries[name]
                return CapabilityMeta(
                    name=name,
                    category=entry.get("category", "unknown"),
                    tags=list(entry.get("tags", [])),
                )
        return None


def load_capability_config(config_path: Path | str | None = None) -> CapabilityConfig:
    """Load capability configuration (defaults to the packaged capabilities.yaml)."""
    return CapabilityConfig(Path(config_path) if config_path else DEFAULT_CONFIG_PATH)
