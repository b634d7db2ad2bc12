"""Runtime assembly for the task graph."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from langchain_core.tools import BaseTool

from smarttask.capabilities import (
    CapabilityRegistry,
    DevOpsClient,
    build_devops_tools,
    build_git_tools,
    build_notification_tools,
    execute_command,
    get_build_context,
    get_environment_variable,
    get_pipeline_variable,
    list_directory,
    read_file,
    set_pipeline_variable,
    write_file,
)
from smarttask.config import Settings, get_settings
from smarttask.config.capability_config import CapabilityConfig, load_capability_config
from smarttask.graph import build_state_graph
from smarttask.telemetry import configure_tracing

from .model_resolver import build_chat_model

LOGGER = logging.getLogger(__name__)

BUILTIN_TOOLS = [
    read_file,
    write_file,
    list_directory,
    execute_command,
    get_environment_variable,
    get_pipeline_variable,
    set_pipeline_variable,
    get_build_context,
]


def _available_tools(settings: Settings) -> Iterable[BaseTool]:
    yield from BUILTIN_TOOLS
    client = DevOpsClient(settings.devops)
    yield from build_devops_tools(client)
    yield from build_git_tools(client)
    yield from build_notification_tools(client)


def create_capability_registry(
    settings: Optional[Settings] = None,
    config: Optional[CapabilityConfig] = None,
) -> CapabilityRegistry:
    """Register every capability enabled in ``capabilities.yaml``."""
    settings = settings or get_settings()
    config = config or load_capability_config(settings.capabilities_config_path)
    enabled = config.get_all_enabled()

    registry = CapabilityRegistry()
    for tool in _available_tools(settings):
        if tool.name not in enabled:
            LOGGER.debug(f"Capability disabled by configuration: {tool.name}")
            continue
        registry.register_tool(tool)
        metadata = config.get_metadata(tool.name)
        if metadata:
            registry.register_meta(metadata)

    unknown = enabled - set(registry.names())
    if unknown:
        LOGGER.warning(f"Configured capabilities with no implementation: {sorted(unknown)}")

    LOGGER.info(f"Registered {len(registry)} capabilities: {', '.join(registry.names())}")
    return registry


def build_application(
    *,
    model=None,
    registry: Optional[CapabilityRegistry] = None,
    settings: Optional[Settings] = None,
):
    """Return a compiled LangGraph application instance."""

    settings = settings or get_settings()
    configure_tracing(settings.observability)

    registry = registry if registry is not None else create_capability_registry(settings)
    model = model if model is not None else build_chat_model(settings.models)

    return build_state_graph(
        model=model,
        registry=registry,
        max_steps=settings.governance.max_steps,
        min_step_length=settings.governance.min_step_length,
        prompt_max_length=settings.observability.log_prompt_max_length,
    )
