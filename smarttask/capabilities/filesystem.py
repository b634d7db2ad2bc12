"""Filesystem capabilities."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any, Dict, List

from langchain_core.tools import tool

from smarttask.utils.error_handler import CapabilityExecutionError, safe_capability

from .base import ToolResult

LOGGER = logging.getLogger(__name__)

__all__ = ["read_file", "write_file", "list_directory"]


@tool
@safe_capability("read_file")
async def read_file(path: Annotated[str, "Path of the file to read"]) -> Dict[str, Any]:
    """Read the contents of a file"""
    full_path = Path(path.strip()).resolve()
    LOGGER.info(f"Reading file: {full_path}")

    content = await asyncio.to_thread(full_path.read_text, encoding="utf-8")
    LOGGER.info(f"File read successfully: {len(content.splitlines())} lines, {len(content.encode('utf-8'))} bytes")
    return ToolResult.ok("read_file", content).model_dump()


@tool
@safe_capability("write_file")
async def write_file(
    payload: Annotated[str, 'JSON object {"filePath": "...", "content": "..."}'],
) -> Dict[str, Any]:
    """Write content to a file. Input: JSON {"filePath": "path", "content": "text"}"""
    data = json.loads(payload)
    file_path = data.get("filePath") if isinstance(data, dict) else None
    content = data.get("content") if isinstance(data, dict) else None
    if not file_path or content is None:
        raise CapabilityExecutionError("filePath and content are required")

    full_path = Path(file_path).resolve()
    LOGGER.info(f"Writing file: {full_path}")

    def _write() -> None:
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content, encoding="utf-8")

    await asyncio.to_thread(_write)
    LOGGER.info(f"File written successfully: {len(content)} chars")
    return ToolResult.ok("write_file", {"filePath": str(full_path), "size": len(content)}).model_dump()


def _describe_entries(directory: Path) -> List[Dict[str, Any]]:
    entries = []
    for child in sorted(directory.iterdir()):
        stats = child.stat()
        entries.append({
            "name": child.name,
            "type": "directory" if child.is_dir() else "file",
            "size": stats.st_size,
            "modified": datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc).isoformat(),
        })
    return entries


@tool
@safe_capability("list_directory")
async def list_directory(path: Annotated[str, "Directory to list"]) -> Dict[str, Any]:
    """List the contents of a directory"""
    full_path = Path(path.strip() or ".").resolve()
    LOGGER.info(f"Listing directory: {full_path}")

    if not full_path.exists():
        return ToolResult.failure("list_directory", f"Directory does not exist: {full_path}").model_dump()
    if not full_path.is_dir():
        return ToolResult.failure("list_directory", f"Path is not a directory: {full_path}").model_dump()

    entries = await asyncio.to_thread(_describe_entries, full_path)
    files = sum(1 for e in entries if e["type"] == "file")
    LOGGER.info(f"Directory listing completed: {files} files, {len(entries) - files} directories")
    return ToolResult.ok("list_directory", entries).model_dump()
