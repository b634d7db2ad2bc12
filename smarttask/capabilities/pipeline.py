"""Pipeline variable capabilities (Azure Pipelines logging commands)."""

import json
import logging
import os
import re
import sys
from typing import Annotated, Any, Dict, Optional, Tuple

from langchain_core.tools import tool

from smarttask.utils.error_handler import CapabilityExecutionError, safe_capability

from .base import ToolResult

LOGGER = logging.getLogger(__name__)

__all__ = [
    "get_pipeline_variable",
    "set_pipeline_variable",
    "get_build_context",
    "pipeline_env_name",
    "parse_variable_assignment",
    "escape_command_data",
    "escape_command_property",
]

BUILD_CONTEXT_VARIABLES = {
    "sourceBranch": "Build.SourceBranch",
    "sourceBranchName": "Build.SourceBranchName",
    "targetBranch": "System.PullRequest.TargetBranch",
    "buildReason": "Build.Reason",
    "buildId": "Build.BuildId",
    "buildNumber": "Build.BuildNumber",
    "buildDefinitionName": "Build.DefinitionName",
    "repositoryName": "Build.Repository.Name",
    "repositoryProvider": "Build.Repository.Provider",
    "repositoryUri": "Build.Repository.Uri",
    "pullRequestId": "System.PullRequest.PullRequestId",
    "pullRequestSourceBranch": "System.PullRequest.SourceBranch",
    "agentName": "Agent.Name",
    "agentOS": "Agent.OS",
    "teamProject": "System.TeamProject",
    "collectionUri": "System.CollectionUri",
}


def pipeline_env_name(variable_name: str) -> str:
    """Map a pipeline variable name to its agent environment name."""
    return re.sub(r"[.\s]", "_", variable_name.strip()).upper()


def read_pipeline_variable(variable_name: str) -> Optional[str]:
    return os.environ.get(variable_name) or os.environ.get(pipeline_env_name(variable_name))


def parse_variable_assignment(raw: str) -> Tuple[str, Any]:
    """Parse ``{"name": ..., "value": ...}`` or ``name=value``."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        parts = raw.split("=")
        if len(parts) != 2:
            raise CapabilityExecutionError(
                'Input must be JSON {"name": "varName", "value": "varValue"} or name=value format'
            )
        return parts[0].strip(), parts[1].strip()

    if not isinstance(data, dict):
        raise CapabilityExecutionError("Input must be a JSON object with name and value properties")
    return data.get("name"), data.get("value")


def escape_command_data(value: str) -> str:
    """Escape the message part of a logging command so it stays on one line."""
    return value.replace("%", "%AZP25").replace("\r", "%0D").replace("\n", "%0A")


def escape_command_property(value: str) -> str:
    """Escape a logging command property; also covers the ``;`` and ``]`` delimiters."""
    return escape_command_data(value).replace("]", "%5D").replace(";", "%3B")


@tool
@safe_capability("get_pipeline_variable")
async def get_pipeline_variable(name: Annotated[str, "Pipeline variable name, e.g. Build.SourceBranch"]) -> Dict[str, Any]:
    """Get the value of a pipeline variable by name"""
    value = read_pipeline_variable(name)
    LOGGER.info(f"Pipeline variable {'found' if value else 'not found'}: {name.strip()}")
    return ToolResult.ok("get_pipeline_variable", value or None).model_dump()


@tool
@safe_capability("set_pipeline_variable")
async def set_pipeline_variable(
    assignment: Annotated[str, 'JSON {"name": "varName", "value": "varValue"} or name=value'],
) -> Dict[str, Any]:
    """Set a pipeline variable that can be used by subsequent tasks. Input: JSON {"name": "varName", "value": "varValue"} or name=value"""
    name, value = parse_variable_assignment(assignment)
    if not name:
        raise CapabilityExecutionError("Variable name is required")

    name = str(name)
    value = "" if value is None else str(value)
    LOGGER.info(f"Setting pipeline variable: {name} = {value}")

    command_name = escape_command_property(name)
    command_value = escape_command_data(value)
    # Job-scoped variable plus an output variable for downstream jobs and stages
    sys.stdout.write(f"##vso[task.setvariable variable={command_name}]{command_value}\n")
    sys.stdout.write(f"##vso[task.setvariable variable={command_name};isOutput=true]{command_value}\n")
    sys.stdout.flush()
    os.environ[pipeline_env_name(name)] = value

    return ToolResult.ok("set_pipeline_variable", {"name": name, "value": value}).model_dump()


@tool
@safe_capability("get_build_context")
async def get_build_context(query: Annotated[str, "Ignored"] = "") -> Dict[str, Any]:
    """Get the build context in one call: source/target branch, build reason, build id and number, repository, pull request and agent information"""
    context = {key: read_pipeline_variable(var) for key, var in BUILD_CONTEXT_VARIABLES.items()}
    context["isPullRequest"] = context["buildReason"] == "PullRequest"
    LOGGER.info(
        f"Build context: branch={context['sourceBranchName']} reason={context['buildReason']} "
        f"repository={context['repositoryName']}"
    )
    return ToolResult.ok("get_build_context", context).model_dump()
