"""Execution modes and their completion heuristics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Sequence, Tuple

from smarttask.utils.error_handler import InvalidInputError

CompletionPredicate = Callable[[Sequence[Tuple[str, str]]], bool]


class TaskMode(str, Enum):
    DECISION = "decision"
    EXECUTION = "execution"


@dataclass(frozen=True, slots=True)
class ModeProfile:
    """Mode-specific requirements rendered into prompts."""

    mode: TaskMode
    required_capability: str
    final_step_goal: str
    executor_trigger: str
    achieved_label: str
    pending_label: str

    @property
    def final_step_rule(self) -> str:
        return f"Final step MUST use {self.required_capability} tool {self.final_step_goal}"

    @property
    def executor_rule(self) -> str:
        return f"{self.executor_trigger}, use {self.required_capability} tool"


def decision_completed(past_steps: Sequence[Tuple[str, str]]) -> bool:
    return any(
        "variable" in outcome or "decision" in outcome or "set" in outcome or "set_pipeline_variable" in step
        for step, outcome in past_steps
    )


def execution_completed(past_steps: Sequence[Tuple[str, str]]) -> bool:
    return any(
        "executed" in outcome or "completed" in outcome or "success" in outcome or "execute_command" in step
        for step, outcome in past_steps
    )


MODE_PROFILES: Dict[TaskMode, ModeProfile] = {
    TaskMode.DECISION: ModeProfile(
        mode=TaskMode.DECISION,
        required_capability="set_pipeline_variable",
        final_step_goal="to set the decision result",
        executor_trigger="When you need to make a final decision",
        achieved_label="ACHIEVED - Variable/decision set",
        pending_label="Pending - No decision variable set yet",
    ),
    TaskMode.EXECUTION: ModeProfile(
        mode=TaskMode.EXECUTION,
        required_capability="execute_command",
        final_step_goal="to run the required commands",
        executor_trigger="When you need to execute commands",
        achieved_label="ACHIEVED - Commands executed",
        pending_label="Pending - No execution completed yet",
    ),
}

_COMPLETION_PREDICATES: Dict[TaskMode, CompletionPredicate] = {
    TaskMode.DECISION: decision_completed,
    TaskMode.EXECUTION: execution_completed,
}


def parse_mode(value: "TaskMode | str") -> TaskMode:
    """Return the TaskMode for ``value``.

    Raises:
        InvalidInputError: unknown mode.
    """
    if isinstance(value, TaskMode):
        return value
    try:
        return TaskMode(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in TaskMode)
        raise InvalidInputError(f"Invalid mode: {value}. Must be one of: {allowed}") from None


def get_mode_profile(mode: "TaskMode | str") -> ModeProfile:
    return MODE_PROFILES[parse_mode(mode)]


def register_completion_predicate(mode: "TaskMode | str", predicate: CompletionPredicate) -> None:
    """Replace the completion heuristic used by the replanner for ``mode``."""
    _COMPLETION_PREDICATES[parse_mode(mode)] = predicate


def get_completion_predicate(mode: "TaskMode | str") -> CompletionPredicate:
    return _COMPLETION_PREDICATES[parse_mode(mode)]
