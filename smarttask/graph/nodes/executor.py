"""Executor node: run the head plan step as reasoning or capability calls."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List

from smarttask.agents import Oracle, invoke_oracle
from smarttask.capabilities import CapabilityRegistry
from smarttask.graph.prompts import build_executor_prompt
from smarttask.graph.state import TaskState
from smarttask.utils.error_handler import describe_error, with_error_boundary
from smarttask.utils.json_extract import parse_json_response
from smarttask.utils.logging_utils import (
    log_node_entry,
    log_node_exit,
    log_prompt,
    log_step_execution,
    preview,
)

LOGGER = logging.getLogger("smarttask.executor")

NO_PLAN_STEP = ("No plan available", "Unable to execute - no plan found")
INVALID_FORMAT_OUTCOME = "Invalid execution format - no result produced"


def _record_failed_step(state: Dict[str, Any], error: Exception) -> Dict[str, Any]:
    """Fallback delta: log the failure as the step outcome and pop the step."""
    plan = list(state.get("plan") or [])
    if not plan:
        return {"past_steps": [NO_PLAN_STEP]}
    outcome = f"Execution failed: {describe_error(error)}"
    return {"past_steps": [(plan[0], outcome)], "plan": plan[1:]}


async def run_invocation(registry: CapabilityRegistry, invocation: Any) -> str:
    """Dispatch one ``{tool, input}`` entry and render its outcome line."""
    name = invocation.get("tool") if isinstance(invocation, dict) else None
    if not isinstance(name, str) or name not in registry:
        return f"Unknown tool: {name}"

    tool_input = invocation.get("input", "")
    if not isinstance(tool_input, str):
        tool_input = json.dumps(tool_input)

    result = await registry.invoke(name, tool_input)
    if result.success:
        return f"{name}: {json.dumps(result.result, default=str)}"
    return f"{name}: {result.error}"


async def run_invocations(registry: CapabilityRegistry, invocations: List[Any]) -> str:
    """Run every invocation concurrently; join outcomes in list order."""
    outcomes = await asyncio.gather(*(run_invocation(registry, item) for item in invocations))
    return "\n".join(outcomes)


async def interpret_execution(registry: CapabilityRegistry, data: Any) -> str:
    if not isinstance(data, dict):
        return INVALID_FORMAT_OUTCOME

    kind = data.get("type")
    if kind == "reasoning":
        result = data.get("result")
        return result if isinstance(result, str) else json.dumps(result, default=str)
    if kind == "tools" and isinstance(data.get("tools"), list):
        return await run_invocations(registry, data["tools"])
    return INVALID_FORMAT_OUTCOME


def build_executor_node(
    *,
    model: Oracle,
    registry: CapabilityRegistry,
    prompt_max_length: int = 500,
):
    """Create the executor node bound to the oracle and capability registry."""

    @with_error_boundary("executor", _record_failed_step)
    async def executor_node(state: TaskState) -> TaskState:
        log_node_entry(LOGGER, "executor", state)

        if state.get("response"):
            LOGGER.info("Response already set, nothing to execute")
            return {}

        plan = list(state.get("plan") or [])
        if not plan:
            LOGGER.warning("No plan available to execute")
            return {"past_steps": [NO_PLAN_STEP]}

        past_steps = state.get("past_steps") or []
        step = plan[0]
        log_step_execution(LOGGER, len(past_steps) + 1, len(past_steps) + len(plan), step)

        context = state.get("context", {})
        system_prompt = build_executor_prompt(
            step=step,
            mode=context.get("mode", ""),
            context=context,
            catalog=registry.render_catalog(),
        )
        log_prompt(LOGGER, "executor", system_prompt, prompt_max_length)

        reply = await invoke_oracle(model, system_prompt)
        outcome = await interpret_execution(registry, parse_json_response(reply))
        LOGGER.info(f"Step result: {preview(outcome)}")

        updates: TaskState = {"past_steps": [(step, outcome)], "plan": plan[1:]}
        log_node_exit(LOGGER, "executor", updates)
        return updates

    return executor_node
