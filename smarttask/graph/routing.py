"""Conditional routing after the replanner."""

from __future__ import annotations

import logging
from typing import Callable, Literal

from langgraph.graph import END

from smarttask.utils.logging_utils import log_routing_decision

from .state import TaskState

LOGGER = logging.getLogger("smarttask.routing")

ContinueRoute = Callable[[TaskState], Literal["executor", "__end__"]]


def build_continue_route(max_steps: int = 10) -> ContinueRoute:
    """Return the replanner → executor | END guard for a step ceiling."""

    def should_continue(state: TaskState) -> Literal["executor", "__end__"]:
        completed = len(state.get("past_steps") or [])

        if state.get("response"):
            decision = END
            reason = "Final response provided"
        elif not state.get("plan"):
            decision = END
            reason = "No remaining plan steps"
        elif completed > max_steps:
            decision = END
            reason = f"Step ceiling exceeded ({completed} > {max_steps})"
        else:
            decision = "executor"
            reason = f"{len(state['plan'])} steps remaining"

        log_routing_decision(LOGGER, "replanner", decision, reason)
        return decision

    return should_continue
