"""End-to-end runs of the compiled plan / execute / replan graph."""

import pytest

from smarttask import TaskAgent
from smarttask.capabilities import CapabilityRegistry
from smarttask.graph.nodes.replanner import (
    NO_ESSENTIAL_STEPS_RESPONSE,
    REPLAN_ERROR_RESPONSE,
    STEP_LIMIT_RESPONSE,
)

pytestmark = pytest.mark.integration


async def collect_states(agent, objective="set build status to green", mode="decision", context=None):
    return [snapshot async for snapshot in agent.stream(objective, mode, context)]


class TestScenarios:

    @pytest.mark.asyncio
    async def test_decision_run_marks_build_green(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(
            planner=[{"steps": ["inspect test results", "record decision"]}],
            executor=[
                {"type": "reasoning", "result": "All 120 tests passed"},
                {"type": "tools", "tools": [
                    {"tool": "set_pipeline_variable", "input": '{"name": "buildStatus", "value": "green"}'},
                ]},
            ],
            replanner=[
                {"action": {"steps": ["record decision"]}},
                {"response": "Build marked green"},
            ],
        )
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        result = await agent.execute("set build status to green", "decision")

        assert result.success is True
        assert result.response == "Build marked green"
        assert result.error is None
        assert len(oracle.calls_for("planner")) == 1
        assert len(oracle.calls_for("executor")) == 2

        first_replan = oracle.calls_for("replanner")[0][0].content
        assert "Pending - No decision variable set yet" in first_replan
        second_replan = oracle.calls_for("replanner")[1][0].content
        assert "ACHIEVED - Variable/decision set" in second_replan

    @pytest.mark.asyncio
    async def test_unknown_capability_keeps_running(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(
            planner=[{"steps": ["fetch data from somewhere"]}],
            executor=[{"type": "tools", "tools": [{"tool": "nonexistent", "input": "x"}]}],
            replanner=[{"response": "Could not fetch data"}],
        )
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        states = await collect_states(agent)

        assert states[-1]["past_steps"] == [("fetch data from somewhere", "Unknown tool: nonexistent")]
        assert states[-1]["response"] == "Could not fetch data"

    @pytest.mark.asyncio
    async def test_ceiling_forces_generic_completion(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(
            planner=[{"steps": ["do something vague but >10 chars"]}],
            executor=[{"type": "reasoning", "result": "thinking"}],
            replanner=[{"action": {"steps": ["do something vague but >10 chars"]}}],
        )
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        states = await collect_states(agent)
        final = states[-1]

        assert len(final["past_steps"]) == settings.governance.max_steps + 1
        assert final["response"] == STEP_LIMIT_RESPONSE
        assert len(oracle.calls_for("executor")) == settings.governance.max_steps + 1

    @pytest.mark.asyncio
    async def test_always_unparseable_oracle_terminates(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(planner=["???"], executor=["???"], replanner=["???"])
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        states = await collect_states(agent)
        final = states[-1]

        assert final["plan"] == []
        assert final["past_steps"][0][0] == "Analyze the request and provide appropriate response"
        assert final["past_steps"][0][1].startswith("Execution failed: ")
        assert final["response"] == REPLAN_ERROR_RESPONSE

    @pytest.mark.asyncio
    async def test_filtered_replan_terminates(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(
            planner=[{"steps": ["inspect test results"]}],
            replanner=[{"action": {"steps": ["continue", "proceed", "abc"]}}],
        )
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        result = await agent.execute("set build status to green", "decision")

        assert result.response == NO_ESSENTIAL_STEPS_RESPONSE
        assert len(oracle.calls_for("executor")) == 1

    @pytest.mark.asyncio
    async def test_empty_plan_runs_one_no_plan_tick(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(planner=[{"steps": []}], replanner=[{"response": "Nothing to do"}])
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        states = await collect_states(agent)

        assert states[-1]["past_steps"] == [("No plan available", "Unable to execute - no plan found")]
        assert oracle.calls_for("executor") == []


class TestInvariants:

    @pytest.mark.asyncio
    async def test_history_is_append_only(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(
            planner=[{"steps": ["first real step", "second real step", "third real step"]}],
            executor=[
                {"type": "reasoning", "result": "one"},
                {"type": "reasoning", "result": "two"},
                {"type": "reasoning", "result": "three"},
            ],
            replanner=[
                {"action": {"steps": ["second real step", "third real step"]}},
                {"action": {"steps": ["third real step"]}},
                {"response": "All done"},
            ],
        )
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        states = await collect_states(agent)

        previous = []
        for snapshot in states:
            current = list(snapshot.get("past_steps") or [])
            assert current[: len(previous)] == previous
            previous = current
        assert [outcome for _, outcome in previous] == ["one", "two", "three"]

    @pytest.mark.asyncio
    async def test_response_is_terminal(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(
            planner=[{"steps": ["first real step", "second real step"]}],
            replanner=[{"response": "Stopped early"}],
        )
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        states = await collect_states(agent)

        terminal_index = next(i for i, s in enumerate(states) if s.get("response"))
        terminal = states[terminal_index]
        for later in states[terminal_index:]:
            assert later["plan"] == terminal["plan"]
            assert later["past_steps"] == terminal["past_steps"]
        assert terminal["plan"] == ["second real step"]
        assert len(oracle.calls_for("executor")) == 1

    @pytest.mark.asyncio
    async def test_mode_survives_the_run(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(planner=[{"steps": ["a real first step"]}])
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        states = await collect_states(agent, mode="execution", context={"mode": "decision", "target": "dist"})

        assert all(s["context"]["mode"] == "execution" for s in states)
        assert states[-1]["context"]["target"] == "dist"


class TestRunBoundary:

    @pytest.mark.asyncio
    async def test_invalid_mode_is_failed_result(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle()
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        result = await agent.execute("do it", "review")

        assert result.success is False
        assert "Invalid mode: review" in result.error
        assert oracle.calls == []

    @pytest.mark.asyncio
    async def test_empty_objective_is_failed_result(self, scripted_oracle, registry, settings):
        agent = TaskAgent(model=scripted_oracle(), registry=registry, settings=settings)

        result = await agent.execute("   ", "decision")

        assert result.success is False
        assert result.error == "Objective must be a non-empty string"

    @pytest.mark.asyncio
    async def test_planner_outage_is_failed_result(self, scripted_oracle, registry, settings):
        oracle = scripted_oracle(planner=[RuntimeError("connection refused")])
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        result = await agent.execute("set build status to green", "decision")

        assert result.success is False
        assert "connection refused" in result.error

    @pytest.mark.asyncio
    async def test_capability_failure_is_recorded_not_raised(self, scripted_oracle, capability_factory, settings):
        registry = CapabilityRegistry([capability_factory("execute_command", success=False, error="exit code 2")])
        oracle = scripted_oracle(
            planner=[{"steps": ["run the build script"]}],
            executor=[{"type": "tools", "tools": [{"tool": "execute_command", "input": "make"}]}],
            replanner=[{"response": "Build script failed"}],
        )
        agent = TaskAgent(model=oracle, registry=registry, settings=settings)

        result = await agent.execute("run the build", "execution")

        assert result.success is True
        assert result.response == "Build script failed"
        replan_prompt = oracle.calls_for("replanner")[0][0].content
        assert "execute_command: exit code 2" in replan_prompt
