"""Capability collections and registries."""

from .base import Capability, CapabilityFn, ToolResult
from .registry import CapabilityMeta, CapabilityRegistry
from .build import build_devops_tools
from .devops_client import DevOpsClient
from .execution import execute_command, get_environment_variable
from .filesystem import list_directory, read_file, write_file
from .git import build_git_tools
from .notification import build_notification_tools
from .pipeline import get_build_context, get_pipeline_variable, set_pipeline_variable

__all__ = [
    "Capability",
    "CapabilityFn",
    "ToolResult",
    "CapabilityMeta",
    "CapabilityRegistry",
    "build_devops_tools",
    "build_git_tools",
    "build_notification_tools",
    "DevOpsClient",
    "execute_command",
    "get_environment_variable",
    "list_directory",
    "read_file",
    "write_file",
    "get_build_context",
    "get_pipeline_variable",
    "set_pipeline_variable",
]
