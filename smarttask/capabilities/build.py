"""Build and pipeline REST capabilities bound to a DevOps client."""

import logging
from typing import Annotated, Any, Dict, List

from langchain_core.tools import BaseTool, tool

from smarttask.utils.error_handler import CapabilityExecutionError, safe_capability

from .base import ToolResult
from .devops_client import DevOpsClient

LOGGER = logging.getLogger(__name__)

TEST_RUN_COUNTERS = ("totalTests", "passedTests", "failedTests", "skippedTests", "incompleteTests", "unanalyzedTests")


def summarise_test_run(run: Dict[str, Any]) -> Dict[str, Any]:
    """Per-run counters; ``notApplicableTests`` are reported as skipped."""
    total = run.get("totalTests") or 0
    passed = run.get("passedTests") or 0
    skipped = run.get("notApplicableTests") or 0
    incomplete = run.get("incompleteTests") or 0
    return {
        "name": run.get("name"),
        "state": run.get("state"),
        "totalTests": total,
        "passedTests": passed,
        "failedTests": max(total - passed - skipped - incomplete, 0),
        "skippedTests": skipped,
        "incompleteTests": incomplete,
        "unanalyzedTests": run.get("unanalyzedTests") or 0,
    }


def build_devops_tools(client: DevOpsClient) -> List[BaseTool]:
    """Create the REST-backed capabilities for ``client``."""

    @tool
    @safe_capability("get_build_info")
    async def get_build_info(build_id: Annotated[str, "Build id (empty for the current build)"] = "") -> Dict[str, Any]:
        """Get detailed information about the current build (or the build id given as input)"""
        info = await client.get_build_info(build_id)
        return ToolResult.ok("get_build_info", {
            "id": info.get("id"),
            "buildNumber": info.get("buildNumber"),
            "status": info.get("status"),
            "result": info.get("result"),
            "reason": info.get("reason"),
            "sourceBranch": info.get("sourceBranch"),
            "sourceVersion": info.get("sourceVersion"),
            "definition": (info.get("definition") or {}).get("name"),
            "requestedFor": (info.get("requestedFor") or {}).get("displayName"),
            "startTime": info.get("startTime"),
            "finishTime": info.get("finishTime"),
        }).model_dump()

    @tool
    @safe_capability("get_test_results")
    async def get_test_results(build_id: Annotated[str, "Build id (empty for the current build)"] = "") -> Dict[str, Any]:
        """Get test results for the current build (or the build id given as input)"""
        runs = await client.get_test_results(build_id)
        summary = [summarise_test_run(run) for run in runs.get("value", [])]
        totals = {key: sum(run[key] for run in summary) for key in TEST_RUN_COUNTERS}
        return ToolResult.ok("get_test_results", {"runs": summary, **totals}).model_dump()

    @tool
    @safe_capability("get_build_changes")
    async def get_build_changes(build_id: Annotated[str, "Build id (empty for the current build)"] = "") -> Dict[str, Any]:
        """Get the list of changes (commits) included in the current build"""
        changes = await client.get_build_changes(build_id)
        return ToolResult.ok("get_build_changes", [
            {
                "id": change.get("id"),
                "message": change.get("message"),
                "author": (change.get("author") or {}).get("displayName"),
                "timestamp": change.get("timestamp"),
            }
            for change in changes.get("value", [])
        ]).model_dump()

    @tool
    @safe_capability("get_pipeline_timeline")
    async def get_pipeline_timeline(build_id: Annotated[str, "Build id (empty for the current build)"] = "") -> Dict[str, Any]:
        """Get pipeline execution timeline and performance metrics"""
        timeline = await client.get_pipeline_timeline(build_id)
        return ToolResult.ok("get_pipeline_timeline", {
            "records": [
                {
                    "name": record.get("name"),
                    "type": record.get("type"),
                    "state": record.get("state"),
                    "result": record.get("result"),
                    "startTime": record.get("startTime"),
                    "finishTime": record.get("finishTime"),
                }
                for record in timeline.get("records", [])
            ],
            "lastChangedBy": timeline.get("lastChangedBy"),
            "lastChangedOn": timeline.get("lastChangedOn"),
        }).model_dump()

    @tool
    @safe_capability("check_artifact_exists")
    async def check_artifact_exists(artifact_name: Annotated[str, "Artifact name, e.g. drop"]) -> Dict[str, Any]:
        """Check if a specific artifact exists in the current build"""
        artifact_name = artifact_name.strip()
        if not artifact_name:
            raise CapabilityExecutionError("Artifact name is required")
        artifacts = (await client.get_artifacts()).get("value", [])
        artifact = next((a for a in artifacts if a.get("name") == artifact_name), None)
        LOGGER.info(f"Artifact {artifact_name} {'found' if artifact else 'not found'} among {len(artifacts)}")
        return ToolResult.ok("check_artifact_exists", {
            "exists": artifact is not None,
            "artifact": artifact,
            "allArtifacts": [a.get("name") for a in artifacts],
        }).model_dump()

    @tool
    @safe_capability("get_build_work_items")
    async def get_build_work_items(build_id: Annotated[str, "Build id (empty for the current build)"] = "") -> Dict[str, Any]:
        """Get work items associated with the current build"""
        work_items = await client.get_build_work_items(build_id)
        items = work_items.get("value", [])
        return ToolResult.ok("get_build_work_items", {
            "count": work_items.get("count", len(items)),
            "workItems": items,
        }).model_dump()

    return [
        get_build_info,
        get_test_results,
        get_build_changes,
        get_pipeline_timeline,
        check_artifact_exists,
        get_build_work_items,
    ]
