"""Tests for the DevOps REST client and the build, git and notification capabilities."""

import json

import httpx
import pytest

from smarttask.capabilities import (
    Capability,
    DevOpsClient,
    build_devops_tools,
    build_git_tools,
    build_notification_tools,
)
from smarttask.config import DevOpsSettings
from smarttask.utils.error_handler import CapabilityExecutionError, ConfigurationError

REPOSITORY_ID = "0f1e2d3c-4b5a-6978-8a9b-0c1d2e3f4a5b"


def make_settings(**overrides):
    values = {
        "SYSTEM_COLLECTIONURI": "https://dev.azure.com/contoso",
        "SYSTEM_TEAMPROJECT": "web",
        "SYSTEM_ACCESSTOKEN": "token-123",
        "BUILD_BUILDID": "42",
        "BUILD_BUILDNUMBER": "20240501.3",
        "BUILD_REPOSITORY_ID": REPOSITORY_ID,
        "BUILD_SOURCEVERSION": "abc123",
        "BUILD_SOURCEBRANCH": "refs/heads/main",
        "BUILD_REQUESTEDFOR": "Dana",
        "SYSTEM_PULLREQUEST_PULLREQUESTID": None,
    }
    values.update(overrides)
    return DevOpsSettings(**values)


def make_transport(routes, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        for path, payload in routes.items():
            if request.url.path.endswith(path):
                return httpx.Response(200, json=payload)
        return httpx.Response(404, json={"message": "not found"})

    return httpx.MockTransport(handler)


def tools_for(factory, routes, seen=None, **overrides):
    client = DevOpsClient(make_settings(**overrides), transport=make_transport(routes, seen))
    return {t.name: t for t in factory(client)}


class TestDevOpsClient:

    def test_base_url_joins_collection_and_project(self):
        client = DevOpsClient(make_settings())
        assert client.base_url == "https://dev.azure.com/contoso/web/_apis"

    def test_missing_collection_is_configuration_error(self):
        client = DevOpsClient(make_settings(SYSTEM_COLLECTIONURI=None))
        with pytest.raises(ConfigurationError):
            client.base_url

    def test_resolve_build_id_prefers_explicit_value(self):
        client = DevOpsClient(make_settings())
        assert client.resolve_build_id(" 7 ") == "7"
        assert client.resolve_build_id("") == "42"

    @pytest.mark.asyncio
    async def test_request_sends_bearer_token_and_api_version(self):
        seen = []
        client = DevOpsClient(make_settings(), transport=make_transport({"/builds/42": {"id": 42}}, seen))

        data = await client.get_build_info()

        assert data == {"id": 42}
        assert seen[0].headers["Authorization"] == "Bearer token-123"
        assert seen[0].url.params["api-version"] == "7.0"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        client = DevOpsClient(make_settings(), transport=make_transport({}))

        with pytest.raises(CapabilityExecutionError, match="Azure DevOps API request failed: 404"):
            await client.get_build_changes()

    @pytest.mark.asyncio
    async def test_missing_token_is_configuration_error(self):
        client = DevOpsClient(make_settings(SYSTEM_ACCESSTOKEN=None), transport=make_transport({}))

        with pytest.raises(ConfigurationError):
            await client.get_build_info()

    @pytest.mark.asyncio
    async def test_test_results_query_by_build_uri(self):
        seen = []
        routes = {
            "/builds/42": {"id": 42, "uri": "vstfs:///Build/Build/42"},
            "/test/runs": {"value": []},
        }
        client = DevOpsClient(make_settings(), transport=make_transport(routes, seen))

        await client.get_test_results()

        assert seen[-1].url.params["buildUri"] == "vstfs:///Build/Build/42"

    def test_repository_id_extracted_from_url(self):
        client = DevOpsClient(make_settings(
            BUILD_REPOSITORY_ID=f"https://dev.azure.com/contoso/_apis/git/repositories/{REPOSITORY_ID}"
        ))
        assert client.resolve_repository_id() == REPOSITORY_ID
        assert client.resolve_repository_id("other-repo") == "other-repo"

    def test_missing_repository_is_configuration_error(self):
        client = DevOpsClient(make_settings(BUILD_REPOSITORY_ID=None))
        with pytest.raises(ConfigurationError, match="Build.Repository.ID"):
            client.resolve_repository_id()

    @pytest.mark.asyncio
    async def test_git_endpoints(self):
        seen = []
        routes = {
            "/commits/abc123": {"commitId": "abc123"},
            "/pullrequests/7": {"pullRequestId": 7},
            f"/repositories/{REPOSITORY_ID}": {"id": REPOSITORY_ID},
        }
        client = DevOpsClient(make_settings(), transport=make_transport(routes, seen))

        await client.get_commit_info()
        await client.get_pull_request("7")
        await client.get_repository()

        assert [r.url.path for r in seen] == [
            f"/contoso/web/_apis/git/repositories/{REPOSITORY_ID}/commits/abc123",
            f"/contoso/web/_apis/git/repositories/{REPOSITORY_ID}/pullrequests/7",
            f"/contoso/web/_apis/git/repositories/{REPOSITORY_ID}",
        ]

    @pytest.mark.asyncio
    async def test_branch_policies_filter_by_repository_and_ref(self):
        seen = []
        client = DevOpsClient(make_settings(), transport=make_transport({"/policy/configurations": {"value": []}}, seen))

        await client.get_branch_policies(ref_name="refs/heads/main")

        assert seen[0].url.params["repositoryId"] == REPOSITORY_ID
        assert seen[0].url.params["refName"] == "refs/heads/main"

    @pytest.mark.asyncio
    async def test_build_artifact_and_work_item_endpoints(self):
        seen = []
        routes = {"/builds/42/artifacts": {"value": []}, "/builds/42/workitems": {"value": []}}
        client = DevOpsClient(make_settings(), transport=make_transport(routes, seen))

        await client.get_artifacts()
        await client.get_build_work_items()

        assert [r.url.path.rsplit("/", 1)[-1] for r in seen] == ["artifacts", "workitems"]


class TestBuildCapabilities:

    @pytest.mark.asyncio
    async def test_test_results_are_summarised(self):
        routes = {
            "/builds/42": {"id": 42, "uri": "vstfs:///Build/Build/42"},
            "/test/runs": {"value": [
                {"name": "unit", "state": "Completed", "totalTests": 10, "passedTests": 6,
                 "notApplicableTests": 1, "incompleteTests": 1, "unanalyzedTests": 1},
                {"name": "e2e", "state": "Completed", "totalTests": 5, "passedTests": 5, "unanalyzedTests": 0},
            ]},
        }
        tools = {t.name: t for t in build_devops_tools(DevOpsClient(make_settings(), transport=make_transport(routes)))}

        result = await Capability.from_tool(tools["get_test_results"]).execute("")

        assert result.success is True
        assert result.result["totalTests"] == 15
        assert result.result["passedTests"] == 11
        assert result.result["failedTests"] == 2
        assert result.result["skippedTests"] == 1
        assert result.result["incompleteTests"] == 1
        assert result.result["unanalyzedTests"] == 1
        assert result.result["runs"][1]["failedTests"] == 0

    @pytest.mark.asyncio
    async def test_build_changes(self):
        routes = {"/builds/42/changes": {"value": [
            {"id": "abc123", "message": "Fix flaky test", "author": {"displayName": "Dana"}, "timestamp": "2024-01-01"},
        ]}}
        tools = {t.name: t for t in build_devops_tools(DevOpsClient(make_settings(), transport=make_transport(routes)))}

        result = await Capability.from_tool(tools["get_build_changes"]).execute("")

        assert result.result == [
            {"id": "abc123", "message": "Fix flaky test", "author": "Dana", "timestamp": "2024-01-01"},
        ]

    @pytest.mark.asyncio
    async def test_http_errors_become_failed_results(self):
        tools = {t.name: t for t in build_devops_tools(DevOpsClient(make_settings(), transport=make_transport({})))}

        result = await Capability.from_tool(tools["get_pipeline_timeline"]).execute("99")

        assert result.success is False
        assert "404" in result.error
        assert "/build/builds/99/timeline" in result.error

    @pytest.mark.asyncio
    async def test_check_artifact_exists(self):
        routes = {"/builds/42/artifacts": {"count": 2, "value": [
            {"id": 1, "name": "drop", "resource": {"type": "Container"}},
            {"id": 2, "name": "coverage"},
        ]}}
        tools = tools_for(build_devops_tools, routes)

        found = await Capability.from_tool(tools["check_artifact_exists"]).execute("drop")
        missing = await Capability.from_tool(tools["check_artifact_exists"]).execute("symbols")

        assert found.result["exists"] is True
        assert found.result["artifact"]["id"] == 1
        assert missing.result == {"exists": False, "artifact": None, "allArtifacts": ["drop", "coverage"]}

    @pytest.mark.asyncio
    async def test_check_artifact_requires_name(self):
        tools = tools_for(build_devops_tools, {})

        result = await Capability.from_tool(tools["check_artifact_exists"]).execute("  ")

        assert result.success is False
        assert result.error == "Artifact name is required"

    @pytest.mark.asyncio
    async def test_build_work_items(self):
        routes = {"/builds/42/workitems": {"count": 1, "value": [{"id": "101", "url": "https://example/101"}]}}
        tools = tools_for(build_devops_tools, routes)

        result = await Capability.from_tool(tools["get_build_work_items"]).execute("")

        assert result.result == {"count": 1, "workItems": [{"id": "101", "url": "https://example/101"}]}


class TestGitCapabilities:

    @pytest.mark.asyncio
    async def test_commit_info_defaults_to_source_version(self):
        routes = {"/commits/abc123": {
            "commitId": "abc123",
            "author": {"name": "Dana"},
            "committer": {"name": "Dana"},
            "comment": "Fix flaky test",
            "changeCounts": {"Edit": 2},
            "url": "https://example/commit",
            "treeId": "ignored",
        }}
        tools = tools_for(build_git_tools, routes)

        result = await Capability.from_tool(tools["get_commit_info"]).execute("")

        assert result.success is True
        assert result.result == {
            "commitId": "abc123",
            "author": {"name": "Dana"},
            "committer": {"name": "Dana"},
            "comment": "Fix flaky test",
            "changeCounts": {"Edit": 2},
            "url": "https://example/commit",
        }

    @pytest.mark.asyncio
    async def test_commit_info_without_repository_fails(self):
        tools = tools_for(build_git_tools, {}, BUILD_REPOSITORY_ID=None)

        result = await Capability.from_tool(tools["get_commit_info"]).execute("")

        assert result.success is False
        assert result.error == "Build.Repository.ID not available"

    @pytest.mark.asyncio
    async def test_pull_request_info_outside_pr_build(self):
        seen = []
        tools = tools_for(build_git_tools, {}, seen)

        result = await Capability.from_tool(tools["get_pull_request_info"]).execute("")

        assert result.success is True
        assert result.result == {
            "isPullRequest": False,
            "message": "This build is not triggered by a pull request",
        }
        assert seen == []

    @pytest.mark.asyncio
    async def test_pull_request_info_for_triggering_pr(self):
        routes = {"/pullrequests/7": {
            "pullRequestId": 7,
            "title": "Add retries",
            "status": "active",
            "createdBy": {"displayName": "Dana"},
            "sourceRefName": "refs/heads/feature",
            "targetRefName": "refs/heads/main",
            "mergeStatus": "succeeded",
        }}
        tools = tools_for(build_git_tools, routes, SYSTEM_PULLREQUEST_PULLREQUESTID="7")

        result = await Capability.from_tool(tools["get_pull_request_info"]).execute("")

        assert result.result["isPullRequest"] is True
        assert result.result["title"] == "Add retries"
        assert result.result["createdBy"] == "Dana"
        assert result.result["targetRefName"] == "refs/heads/main"

    @pytest.mark.asyncio
    async def test_repository_info(self):
        routes = {f"/repositories/{REPOSITORY_ID}": {
            "id": REPOSITORY_ID,
            "name": "web",
            "url": "https://example/repo",
            "defaultBranch": "refs/heads/main",
            "size": 2048,
            "project": {"name": "web"},
        }}
        tools = tools_for(build_git_tools, routes)

        result = await Capability.from_tool(tools["get_repository_info"]).execute("")

        assert result.result == {
            "id": REPOSITORY_ID,
            "name": "web",
            "url": "https://example/repo",
            "defaultBranch": "refs/heads/main",
            "size": 2048,
            "project": "web",
        }

    @pytest.mark.asyncio
    async def test_branch_policy_for_source_branch(self):
        seen = []
        routes = {"/policy/configurations": {"count": 1, "value": [{"id": 3, "isBlocking": True}]}}
        tools = tools_for(build_git_tools, routes, seen)

        result = await Capability.from_tool(tools["get_branch_policy"]).execute("")

        assert result.result == {"policies": [{"id": 3, "isBlocking": True}], "count": 1, "branch": "refs/heads/main"}
        assert seen[0].url.params["refName"] == "refs/heads/main"

    @pytest.mark.asyncio
    async def test_branch_policy_without_branch_fails(self):
        tools = tools_for(build_git_tools, {}, BUILD_SOURCEBRANCH=None)

        result = await Capability.from_tool(tools["get_branch_policy"]).execute("")

        assert result.success is False
        assert result.error == "Build.SourceBranch not available"


class TestNotificationCapability:

    @pytest.mark.asyncio
    async def test_send_notification_with_build_context(self):
        tools = tools_for(build_notification_tools, {})
        payload = json.dumps({"recipients": ["ops@example.com"], "message": "Deploy <blocked>", "severity": "warning"})

        result = await Capability.from_tool(tools["send_notification"]).execute(payload)

        assert result.success is True
        assert result.result["subject"] == "[web] Build 20240501.3 - WARNING"
        assert result.result["buildId"] == "42"
        assert result.result["recipients"] == ["ops@example.com"]
        assert result.result["emailResult"] == {
            "success": True,
            "message": "Email notification queued",
            "recipients": 1,
        }

    @pytest.mark.asyncio
    async def test_email_body_escapes_message(self, mocker):
        client = DevOpsClient(make_settings(), transport=make_transport({}))
        send = mocker.patch.object(client, "send_email_notification", return_value={"success": True})
        tool = build_notification_tools(client)[0]

        await Capability.from_tool(tool).execute(
            json.dumps({"recipients": ["ops@example.com"], "message": "<b>halt</b>", "subject": "Heads up"})
        )

        recipients, subject, body = send.call_args.args
        assert recipients == ["ops@example.com"]
        assert subject == "Heads up"
        assert "&lt;b&gt;halt&lt;/b&gt;" in body
        assert "<li><strong>Source Branch:</strong> refs/heads/main</li>" in body

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload,error", [
        ("not json", 'Input must be JSON {"recipients"'),
        (json.dumps({"recipients": [], "message": "hi"}), "recipients array is required"),
        (json.dumps({"recipients": ["a@example.com"]}), "message is required"),
    ])
    async def test_send_notification_validates_input(self, payload, error):
        tools = tools_for(build_notification_tools, {})

        result = await Capability.from_tool(tools["send_notification"]).execute(payload)

        assert result.success is False
        assert result.error.startswith(error)
