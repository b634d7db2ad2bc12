"""Planner node: objective + context → initial step list."""

from __future__ import annotations

import json
import logging

from smarttask.agents import Oracle, invoke_oracle
from smarttask.capabilities import CapabilityRegistry
from smarttask.graph.prompts import build_planner_content, build_planner_prompt
from smarttask.graph.state import TaskState
from smarttask.utils.json_extract import parse_json_response
from smarttask.utils.logging_utils import log_node_entry, log_node_exit, log_plan_created, log_prompt

LOGGER = logging.getLogger("smarttask.planner")

FALLBACK_PLAN = ["Analyze the request and provide appropriate response"]


def build_planner_node(
    *,
    model: Oracle,
    registry: CapabilityRegistry,
    prompt_max_length: int = 500,
):
    """Create a planner node bound to the oracle and capability catalog.

    Oracle failures propagate to the run boundary; unparseable replies
    degrade to a single generic step.
    """

    async def planner_node(state: TaskState) -> TaskState:
        log_node_entry(LOGGER, "planner", state)

        context = state.get("context", {})
        system_prompt = build_planner_prompt(
            mode=context.get("mode", ""),
            catalog=registry.render_catalog(),
        )
        log_prompt(LOGGER, "planner", system_prompt, prompt_max_length)

        reply = await invoke_oracle(model, system_prompt, build_planner_content(state.get("input", ""), context))

        try:
            data = parse_json_response(reply)
            steps = data.get("steps") or []
            if not isinstance(steps, list):
                raise TypeError(f"steps must be a list, got {type(steps).__name__}")
            plan = [str(step) for step in steps]
        except (json.JSONDecodeError, AttributeError, TypeError) as e:
            LOGGER.warning(f"Failed to parse plan response: {e}")
            plan = list(FALLBACK_PLAN)

        log_plan_created(LOGGER, "planner", plan)
        updates: TaskState = {"plan": plan}
        log_node_exit(LOGGER, "planner", updates)
        return updates

    return planner_node
