"""Factory for assembling the plan → execute → replan state machine."""

from __future__ import annotations

from typing import Optional

from langgraph.graph import END, START, StateGraph

from smarttask.agents import Oracle
from smarttask.capabilities import CapabilityRegistry
from smarttask.graph.modes import CompletionPredicate
from smarttask.graph.nodes import build_executor_node, build_planner_node, build_replanner_node
from smarttask.graph.routing import build_continue_route
from smarttask.graph.state import TaskState


def recursion_limit_for(max_steps: int) -> int:
    """Super-steps needed for ``max_steps + 1`` executor/replanner ticks plus planning."""
    return 2 * (max_steps + 1) + 5


def build_state_graph(
    *,
    model: Oracle,
    registry: CapabilityRegistry,
    max_steps: int = 10,
    min_step_length: int = 10,
    completion_predicate: Optional[CompletionPredicate] = None,
    prompt_max_length: int = 500,
):
    """Compose and compile the agent graph.

        START → planner → executor → replanner ─┬─→ END
                             ↑                   │
                             └───── continue ────┘

    The planner runs exactly once; the loop ends when the replanner sets
    a response, the plan runs dry, or the step ceiling is exceeded.
    """

    planner_node = build_planner_node(
        model=model,
        registry=registry,
        prompt_max_length=prompt_max_length,
    )

    executor_node = build_executor_node(
        model=model,
        registry=registry,
        prompt_max_length=prompt_max_length,
    )

    replanner_node = build_replanner_node(
        model=model,
        max_steps=max_steps,
        min_step_length=min_step_length,
        completion_predicate=completion_predicate,
        prompt_max_length=prompt_max_length,
    )

    graph = StateGraph(TaskState)

    graph.add_node("planner", planner_node)
    graph.add_node("executor", executor_node)
    graph.add_node("replanner", replanner_node)

    graph.add_edge(START, "planner")
    graph.add_edge("planner", "executor")
    graph.add_edge("executor", "replanner")
    graph.add_conditional_edges(
        "replanner",
        build_continue_route(max_steps),
        {"executor": "executor", END: END},
    )

    return graph.compile()
