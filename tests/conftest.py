"""Pytest configuration and fixtures for all tests.

Provides a scripted oracle that answers by phase (planner, executor,
replanner) and helpers for building in-memory capabilities.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pytest
from langchain_core.messages import AIMessage, BaseMessage

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from smarttask.capabilities import Capability, CapabilityRegistry, ToolResult  # noqa: E402
from smarttask.config import Settings  # noqa: E402

Reply = Union[str, dict, Exception]


def _phase_of(messages: Sequence[BaseMessage]) -> str:
    system = messages[0].content
    if system.startswith("You are an execution agent"):
        return "executor"
    if system.startswith("You are a replanning agent"):
        return "replanner"
    return "planner"


class ScriptedOracle:
    """Fake chat model replaying canned replies per phase.

    Each phase consumes its script in order and repeats the last reply once
    exhausted. Dict replies are JSON-encoded; exceptions are raised.
    """

    def __init__(
        self,
        planner: Optional[List[Reply]] = None,
        executor: Optional[List[Reply]] = None,
        replanner: Optional[List[Reply]] = None,
    ) -> None:
        self.scripts: Dict[str, List[Reply]] = {
            "planner": list(planner or [{"steps": []}]),
            "executor": list(executor or [{"type": "reasoning", "result": "done"}]),
            "replanner": list(replanner or [{"response": "Done"}]),
        }
        self.calls: List[tuple] = []

    def calls_for(self, phase: str) -> List[Sequence[BaseMessage]]:
        return [messages for name, messages in self.calls if name == phase]

    async def ainvoke(self, messages: Sequence[BaseMessage], **kwargs: Any) -> AIMessage:
        phase = _phase_of(messages)
        self.calls.append((phase, list(messages)))
        script = self.scripts[phase]
        reply = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        return AIMessage(content=reply)


def make_capability(
    name: str,
    result: Any = "ok",
    *,
    success: bool = True,
    error: Optional[str] = None,
    delay: float = 0.0,
    description: Optional[str] = None,
    calls: Optional[list] = None,
) -> Capability:
    """Build an in-memory capability with optional artificial latency."""

    async def execute(tool_input: str) -> ToolResult:
        if calls is not None:
            calls.append((name, tool_input))
        if delay:
            await asyncio.sleep(delay)
        if success:
            return ToolResult.ok(name, result)
        return ToolResult.failure(name, error or "boom")

    return Capability(name=name, description=description or f"Fake {name} capability", execute=execute)


@pytest.fixture
def scripted_oracle():
    return ScriptedOracle


@pytest.fixture
def capability_factory():
    return make_capability


@pytest.fixture
def registry():
    """Registry holding a decision-setting and an execution capability."""
    return CapabilityRegistry([
        make_capability("set_pipeline_variable", {"name": "buildStatus", "value": "green"}),
        make_capability("execute_command", {"exitCode": 0, "stdout": "ok"}),
        make_capability("read_file", "file contents"),
    ])


@pytest.fixture
def settings(monkeypatch, tmp_path):
    """Settings isolated from the developer's environment."""
    for name in ("MAX_STEPS", "MIN_STEP_LENGTH", "LANGCHAIN_TRACING_V2", "LANGCHAIN_PROJECT", "LANGCHAIN_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    return Settings()
