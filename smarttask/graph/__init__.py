"""Plan / execute / replan graph."""

from .builder import build_state_graph, recursion_limit_for
from .modes import ModeProfile, TaskMode, get_mode_profile, parse_mode, register_completion_predicate
from .state import TaskState, merge_context

__all__ = [
    "build_state_graph",
    "recursion_limit_for",
    "ModeProfile",
    "TaskMode",
    "get_mode_profile",
    "parse_mode",
    "register_completion_predicate",
    "TaskState",
    "merge_context",
]
