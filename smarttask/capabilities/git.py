"""Repository and pull request capabilities bound to a DevOps client."""

import logging
from typing import Annotated, Any, Dict, List

from langchain_core.tools import BaseTool, tool

from smarttask.utils.error_handler import ConfigurationError, safe_capability

from .base import ToolResult
from .devops_client import DevOpsClient

LOGGER = logging.getLogger(__name__)


def build_git_tools(client: DevOpsClient) -> List[BaseTool]:
    """Create the repository capabilities for ``client``."""

    @tool
    @safe_capability("get_commit_info")
    async def get_commit_info(commit_id: Annotated[str, "Commit SHA (empty for the commit being built)"] = "") -> Dict[str, Any]:
        """Get detailed information about the current commit (or the commit SHA given as input)"""
        commit = await client.get_commit_info(commit_id)
        return ToolResult.ok("get_commit_info", {
            "commitId": commit.get("commitId"),
            "author": commit.get("author"),
            "committer": commit.get("committer"),
            "comment": commit.get("comment"),
            "changeCounts": commit.get("changeCounts"),
            "url": commit.get("url"),
        }).model_dump()

    @tool
    @safe_capability("get_pull_request_info")
    async def get_pull_request_info(pull_request_id: Annotated[str, "Pull request id (empty for the triggering PR)"] = "") -> Dict[str, Any]:
        """Get pull request information if this build is triggered by a PR"""
        pull_request_id = pull_request_id.strip() or client.settings.pull_request_id
        if not pull_request_id:
            return ToolResult.ok("get_pull_request_info", {
                "isPullRequest": False,
                "message": "This build is not triggered by a pull request",
            }).model_dump()

        pr = await client.get_pull_request(pull_request_id)
        return ToolResult.ok("get_pull_request_info", {
            "isPullRequest": True,
            "pullRequestId": pr.get("pullRequestId"),
            "title": pr.get("title"),
            "description": pr.get("description"),
            "status": pr.get("status"),
            "createdBy": (pr.get("createdBy") or {}).get("displayName"),
            "sourceRefName": pr.get("sourceRefName"),
            "targetRefName": pr.get("targetRefName"),
            "mergeStatus": pr.get("mergeStatus"),
        }).model_dump()

    @tool
    @safe_capability("get_repository_info")
    async def get_repository_info(repository_id: Annotated[str, "Repository id (empty for the built repository)"] = "") -> Dict[str, Any]:
        """Get repository information and statistics"""
        repository = await client.get_repository(repository_id)
        return ToolResult.ok("get_repository_info", {
            "id": repository.get("id"),
            "name": repository.get("name"),
            "url": repository.get("url"),
            "defaultBranch": repository.get("defaultBranch"),
            "size": repository.get("size"),
            "project": (repository.get("project") or {}).get("name"),
        }).model_dump()

    @tool
    @safe_capability("get_branch_policy")
    async def get_branch_policy(branch: Annotated[str, "Branch ref, e.g. refs/heads/main (empty for the built branch)"] = "") -> Dict[str, Any]:
        """Get branch policies for the current branch (or the branch ref given as input)"""
        branch = branch.strip() or client.settings.source_branch
        if not branch:
            raise ConfigurationError("Build.SourceBranch not available")
        policies = await client.get_branch_policies(ref_name=branch)
        values = policies.get("value", [])
        LOGGER.info(f"Found {len(values)} policies for {branch}")
        return ToolResult.ok("get_branch_policy", {
            "policies": values,
            "count": policies.get("count", len(values)),
            "branch": branch,
        }).model_dump()

    return [get_commit_info, get_pull_request_info, get_repository_info, get_branch_policy]
