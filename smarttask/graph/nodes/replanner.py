"""Replanner node: decide between a final response and a revised plan."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from smarttask.agents import Oracle, invoke_oracle
from smarttask.graph.modes import CompletionPredicate, get_completion_predicate, get_mode_profile
from smarttask.graph.prompts import build_replanner_prompt
from smarttask.graph.state import TaskState
from smarttask.utils.error_handler import with_error_boundary
from smarttask.utils.json_extract import parse_json_response
from smarttask.utils.logging_utils import (
    log_node_entry,
    log_node_exit,
    log_past_steps,
    log_plan_created,
    log_prompt,
    preview,
)

LOGGER = logging.getLogger("smarttask.replanner")

COMPLETED_RESPONSE = "Task completed successfully"
NO_ESSENTIAL_STEPS_RESPONSE = "Task completed - no additional essential steps identified"
REPLAN_ERROR_RESPONSE = "Task completed with errors during replanning"
STEP_LIMIT_RESPONSE = "Task completed - maximum step limit reached"

INFORMATION_MARKERS = ("file", "read", "found", "analyzed")
ERROR_MARKERS = ("error", "failed", "not found")


def _terminate_with_errors(state: Dict[str, Any], error: Exception) -> Dict[str, Any]:
    return {"response": REPLAN_ERROR_RESPONSE}


def is_vague_step(step: str, min_length: int = 10) -> bool:
    """True for steps that would only restate work or stall the loop."""
    lowered = step.lower()
    return (
        ("analyze" in lowered and "determine" in lowered)
        or ("review" in lowered and "check" in lowered)
        or len(step) < min_length
        or lowered.strip() in ("continue", "proceed")
    )


def filter_steps(steps: Sequence[Any], min_length: int = 10) -> List[str]:
    return [step for step in (str(s) for s in steps) if not is_vague_step(step, min_length)]


def analyze_completion(
    mode: str,
    past_steps: Sequence[Tuple[str, str]],
    predicate: Optional[CompletionPredicate] = None,
) -> str:
    """Summarise progress markers found in step outcomes."""
    analysis = []

    profile = get_mode_profile(mode)
    completed = (predicate or get_completion_predicate(profile.mode))(past_steps)
    label = profile.achieved_label if completed else profile.pending_label
    analysis.append(f"{profile.mode.value.capitalize()} mode completion: {label}")

    gathered = any(marker in outcome for _, outcome in past_steps for marker in INFORMATION_MARKERS)
    analysis.append(
        "Information gathering: "
        + ("COMPLETED - Data collected" if gathered else "Minimal - Limited information gathered")
    )

    recent_errors = [
        outcome for _, outcome in list(past_steps)[-3:]
        if any(marker in outcome for marker in ERROR_MARKERS)
    ]
    if recent_errors:
        analysis.append(
            f"Error status: {len(recent_errors)} recent errors detected - consider completion with current results"
        )

    return "\n".join(analysis)


def interpret_replan(data: Any, min_step_length: int = 10) -> TaskState:
    """Map the oracle's replanning decision onto a state delta."""
    if not isinstance(data, dict):
        return {"response": COMPLETED_RESPONSE}

    response = data.get("response")
    if response:
        LOGGER.info(f"Task completed, final response: {preview(response)}")
        return {"response": str(response)}

    action = data.get("action")
    steps = action.get("steps") if isinstance(action, dict) else None
    if isinstance(steps, list):
        plan = filter_steps(steps, min_step_length)
        if not plan:
            LOGGER.info("All proposed steps were filtered out as non-essential, completing task")
            return {"response": NO_ESSENTIAL_STEPS_RESPONSE}
        log_plan_created(LOGGER, "replanner", plan)
        return {"plan": plan}

    LOGGER.info("No valid action provided, completing task")
    return {"response": COMPLETED_RESPONSE}


def build_replanner_node(
    *,
    model: Oracle,
    max_steps: int = 10,
    min_step_length: int = 10,
    completion_predicate: Optional[CompletionPredicate] = None,
    prompt_max_length: int = 500,
):
    """Create the replanner node.

    Once more than ``max_steps`` steps have completed the oracle is skipped
    and the run is closed with a generic response.
    """

    @with_error_boundary("replanner", _terminate_with_errors)
    async def replanner_node(state: TaskState) -> TaskState:
        log_node_entry(LOGGER, "replanner", state)

        if state.get("response"):
            return {}

        past_steps = state.get("past_steps") or []
        plan = state.get("plan") or []
        LOGGER.info(f"Completed steps: {len(past_steps)}, remaining steps: {len(plan)}")
        log_past_steps(LOGGER, past_steps)

        if len(past_steps) > max_steps:
            LOGGER.warning(f"Step ceiling exceeded ({len(past_steps)} > {max_steps}), forcing completion")
            updates: TaskState = {"response": STEP_LIMIT_RESPONSE}
            log_node_exit(LOGGER, "replanner", updates)
            return updates

        mode = state.get("context", {}).get("mode", "")
        system_prompt = build_replanner_prompt(
            objective=state.get("input", ""),
            mode=mode,
            plan=plan,
            past_steps=past_steps,
            analysis=analyze_completion(mode, past_steps, completion_predicate),
        )
        log_prompt(LOGGER, "replanner", system_prompt, prompt_max_length)

        reply = await invoke_oracle(model, system_prompt)
        updates = interpret_replan(parse_json_response(reply), min_step_length)
        log_node_exit(LOGGER, "replanner", updates)
        return updates

    return replanner_node
