"""Graph nodes exports."""

from .executor import build_executor_node
from .planner import build_planner_node
from .replanner import build_replanner_node

__all__ = [
    "build_planner_node",
    "build_executor_node",
    "build_replanner_node",
]
