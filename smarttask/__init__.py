"""Smart Task: a bounded plan / execute / replan agent for CI pipelines."""

from .agent import TaskAgent
from .runtime import ResultBuilder, TaskResult

__all__ = ["TaskAgent", "ResultBuilder", "TaskResult"]
