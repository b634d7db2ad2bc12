"""Task agent: the run boundary around the plan/execute/replan graph."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, Optional

from smarttask.capabilities import CapabilityRegistry
from smarttask.config import Settings, get_settings
from smarttask.graph import TaskMode, TaskState, recursion_limit_for
from smarttask.runtime import ResultBuilder, TaskResult, build_application, build_context
from smarttask.runtime.context import AdditionalContext
from smarttask.utils.error_handler import InvalidInputError
from smarttask.utils.logging_utils import log_error

LOGGER = logging.getLogger("smarttask.agent")


class TaskAgent:
    """Runs one objective per ``execute`` call and never raises.

    Example:
        agent = TaskAgent()
        result = await agent.execute("set build status to green", "decision")
        if result.success:
            print(result.response)
    """

    def __init__(
        self,
        *,
        model=None,
        registry: Optional[CapabilityRegistry] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._model = model
        self._registry = registry
        self._app = None

    @property
    def app(self):
        """Compiled graph, built on first use."""
        if self._app is None:
            self._app = build_application(model=self._model, registry=self._registry, settings=self.settings)
        return self._app

    @property
    def run_config(self) -> Dict[str, Any]:
        return {"recursion_limit": recursion_limit_for(self.settings.governance.max_steps)}

    def initial_state(self, objective: str, mode: "TaskMode | str", context: AdditionalContext = None) -> TaskState:
        if not isinstance(objective, str) or not objective.strip():
            raise InvalidInputError("Objective must be a non-empty string")
        return {
            "input": objective,
            "plan": [],
            "past_steps": [],
            "context": build_context(mode, context),
            "response": None,
        }

    async def stream(
        self,
        objective: str,
        mode: "TaskMode | str",
        context: AdditionalContext = None,
    ) -> AsyncIterator[TaskState]:
        """Yield the full state after every node; errors propagate."""
        state = self.initial_state(objective, mode, context)
        async for snapshot in self.app.astream(state, config=self.run_config, stream_mode="values"):
            yield snapshot

    async def execute(
        self,
        objective: str,
        mode: "TaskMode | str",
        context: AdditionalContext = None,
    ) -> TaskResult:
        LOGGER.info(f"Starting task in {mode} mode: {objective}")
        try:
            state = self.initial_state(objective, mode, context)
            final_state = await self.app.ainvoke(state, config=self.run_config)
        except Exception as e:
            log_error(LOGGER, e, "Task execution failed")
            return ResultBuilder.failure(e)

        result = ResultBuilder.build(final_state)
        LOGGER.info(f"Task finished after {len(final_state.get('past_steps') or [])} steps")
        return result
