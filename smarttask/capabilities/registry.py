"""Capability metadata management and registration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from langchain_core.tools import BaseTool

from smarttask.utils.logging_utils import log_tool_call, log_tool_result

from .base import Capability, ToolResult

LOGGER = logging.getLogger("smarttask.capabilities")


@dataclass(frozen=True, slots=True)
class CapabilityMeta:
    """Describes governance attributes for a capability."""

    name: str
    category: str
    tags: List[str] = field(default_factory=list)


class CapabilityRegistry:
    """Flat table of capabilities, dispatched by exact name match."""

    def __init__(
        self,
        capabilities: Optional[Iterable[Capability]] = None,
        meta: Optional[Iterable[CapabilityMeta]] = None,
    ) -> None:
        self._capabilities: Dict[str, Capability] = {}
        self._meta: Dict[str, CapabilityMeta] = {}
        if capabilities:
            for capability in capabilities:
                self.register(capability)
        if meta:
            for item in meta:
                self.register_meta(item)

    def register(self, capability: Capability) -> None:
        self._capabilities[capability.name] = capability

    def register_tool(self, tool: BaseTool) -> None:
        self.register(Capability.from_tool(tool))

    def register_meta(self, metadata: CapabilityMeta) -> None:
        self._meta[metadata.name] = metadata

    def get(self, name: str) -> Capability:
        if name not in self._capabilities:
            raise KeyError(f"Unknown tool: {name}")
        return self._capabilities[name]

    def get_optional(self, name: str) -> Capability | None:
        return self._capabilities.get(name)

    def get_meta_optional(self, name: str) -> CapabilityMeta | None:
        return self._meta.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._capabilities

    def __len__(self) -> int:
        return len(self._capabilities)

    def names(self) -> List[str]:
        return list(self._capabilities)

    def describe(self) -> List[Dict[str, str]]:
        """Return the ``{name, description}`` list consumed by prompt construction."""
        return [{"name": c.name, "description": c.description} for c in self._capabilities.values()]

    def render_catalog(self) -> str:
        return "\n".join(f"- {c.name}: {c.description}" for c in self._capabilities.values())

    async def invoke(self, name: str, tool_input: str) -> ToolResult:
        """Run a registered capability; exceptions become failed results.

        Raises:
            KeyError: ``name`` is not registered.
        """
        capability = self.get(name)
        log_tool_call(LOGGER, name, tool_input)
        try:
            result = await capability.execute(tool_input)
        except Exception as e:
            LOGGER.warning(f"Capability {name} raised: {e}")
            result = ToolResult.failure(name, str(e) or type(e).__name__)
        log_tool_result(LOGGER, name, result.result if result.success else result.error, result.success)
        return result
