"""Command execution and environment capabilities."""

import asyncio
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Annotated, Any, Dict

from langchain_core.tools import tool

from smarttask.utils.error_handler import safe_capability

from .base import ToolResult

LOGGER = logging.getLogger(__name__)

__all__ = ["execute_command", "get_environment_variable"]

OUTPUT_TAIL_CHARS = 2000


def _tail(text: str) -> str:
    if len(text) > OUTPUT_TAIL_CHARS:
        return "..." + text[-OUTPUT_TAIL_CHARS:]
    return text


@tool
@safe_capability("execute_command")
async def execute_command(command: Annotated[str, "Shell command to run"]) -> Dict[str, Any]:
    """Execute a shell command"""
    cwd = os.getcwd()
    LOGGER.info(f"Executing command: {command}")
    LOGGER.info(f"Working directory: {cwd}")

    process = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )
    stdout_bytes, stderr_bytes = await process.communicate()
    stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
    stderr = stderr_bytes.decode("utf-8", errors="replace").strip()
    exit_code = process.returncode

    LOGGER.info(f"Command completed with exit code: {exit_code}")

    result = {
        "command": command,
        "exitCode": exit_code,
        "stdout": stdout,
        "stderr": stderr,
        "workingDirectory": cwd,
        "platform": sys.platform,
        "executionTime": datetime.now(timezone.utc).isoformat(),
    }
    if exit_code == 0:
        return ToolResult.ok("execute_command", result).model_dump()

    error = f"Command failed with exit code {exit_code}"
    if stderr or stdout:
        error += f": {_tail(stderr or stdout)}"
    return ToolResult.failure("execute_command", error, result=result).model_dump()


@tool
@safe_capability("get_environment_variable")
async def get_environment_variable(name: Annotated[str, "Environment variable name"]) -> Dict[str, Any]:
    """Get the value of an environment variable"""
    name = name.strip()
    value = os.environ.get(name)
    if value:
        LOGGER.info(f"Environment variable found: {name}")
    else:
        LOGGER.info(f"Environment variable not found: {name}")
    return ToolResult.ok("get_environment_variable", value or None).model_dump()
