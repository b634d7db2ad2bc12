"""Capability contract: named operations the executor may invoke."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from langchain_core.tools import BaseTool
from pydantic import BaseModel, model_validator

CapabilityFn = Callable[[str], Awaitable["ToolResult"]]


class ToolResult(BaseModel):
    """Outcome of one capability invocation."""

    name: str
    result: Any = None
    success: bool
    error: Optional[str] = None

    @model_validator(mode="after")
    def _failure_needs_error(self) -> "ToolResult":
        if not self.success and not self.error:
            self.error = "Unknown error"
        return self

    @classmethod
    def ok(cls, name: str, result: Any) -> "ToolResult":
        return cls(name=name, result=result, success=True)

    @classmethod
    def failure(cls, name: str, error: str, result: Any = None) -> "ToolResult":
        return cls(name=name, result=result, success=False, error=error)


@dataclass(frozen=True, slots=True)
class Capability:
    """Tagged record ``{name, description, execute}``.

    ``description`` is rendered verbatim into planner and executor prompts.
    """

    name: str
    description: str
    execute: CapabilityFn

    @classmethod
    def from_tool(cls, tool: BaseTool) -> "Capability":
        """Adapt a single-argument LangChain tool returning a ToolResult payload."""

        arg_names = list(tool.args)

        async def execute(tool_input: str) -> ToolResult:
            payload = {arg_names[0]: tool_input} if arg_names else {}
            output = await tool.ainvoke(payload)
            if isinstance(output, ToolResult):
                return output
            return ToolResult.model_validate(output)

        return cls(name=tool.name, description=tool.description, execute=execute)
