"""Email notification capability carrying build context."""

import html
import json
import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List

from langchain_core.tools import BaseTool, tool

from smarttask.utils.error_handler import CapabilityExecutionError, safe_capability

from .base import ToolResult
from .devops_client import DevOpsClient

LOGGER = logging.getLogger(__name__)

EMAIL_TEMPLATE = """
<h2>Azure DevOps Pipeline Notification</h2>
<p><strong>Message:</strong> {message}</p>
<hr>
<h3>Build Information</h3>
<ul>
    <li><strong>Project:</strong> {project}</li>
    <li><strong>Build Number:</strong> {build_number}</li>
    <li><strong>Build ID:</strong> {build_id}</li>
    <li><strong>Source Branch:</strong> {source_branch}</li>
    <li><strong>Requested For:</strong> {requested_for}</li>
    <li><strong>Severity:</strong> {severity}</li>
    <li><strong>Timestamp:</strong> {timestamp}</li>
</ul>
"""


def parse_notification(raw: str) -> Dict[str, Any]:
    """Parse ``{"recipients": [...], "message": ..., "subject"?: ..., "severity"?: ...}``."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise CapabilityExecutionError(
            'Input must be JSON {"recipients": ["a@example.com"], "message": "...", "subject": "...", "severity": "info"}'
        ) from None
    if not isinstance(data, dict):
        raise CapabilityExecutionError("Input must be a JSON object")

    recipients = data.get("recipients")
    if not recipients or not isinstance(recipients, list):
        raise CapabilityExecutionError("recipients array is required")
    if not data.get("message"):
        raise CapabilityExecutionError("message is required")
    return data


def build_notification_tools(client: DevOpsClient) -> List[BaseTool]:
    """Create the notification capability for ``client``."""

    @tool
    @safe_capability("send_notification")
    async def send_notification(
        notification: Annotated[str, 'JSON {"recipients": [...], "message": "...", "subject": "...", "severity": "info"}'],
    ) -> Dict[str, Any]:
        """Send email notification with build information. Input: JSON {"recipients": ["a@example.com"], "message": "...", "subject": "optional", "severity": "info|warning|error"}"""
        data = parse_notification(notification)
        recipients = [str(r) for r in data["recipients"]]
        message = str(data["message"])
        severity = str(data.get("severity") or "info")
        settings = client.settings
        timestamp = datetime.now(timezone.utc).isoformat()

        subject = data.get("subject") or f"[{settings.team_project}] Build {settings.build_number} - {severity.upper()}"
        body = EMAIL_TEMPLATE.format(
            message=html.escape(message),
            project=html.escape(str(settings.team_project)),
            build_number=html.escape(str(settings.build_number)),
            build_id=html.escape(str(settings.build_id)),
            source_branch=html.escape(str(settings.source_branch)),
            requested_for=html.escape(str(settings.requested_for)),
            severity=html.escape(severity.upper()),
            timestamp=timestamp,
        )

        email_result = await client.send_email_notification(recipients, subject, body)
        LOGGER.info(f"EMAIL NOTIFICATION [{severity.upper()}]: {message}")
        LOGGER.info(f"Recipients: {', '.join(recipients)}")

        return ToolResult.ok("send_notification", {
            "message": message,
            "severity": severity,
            "recipients": recipients,
            "subject": subject,
            "timestamp": timestamp,
            "buildId": settings.build_id,
            "buildNumber": settings.build_number,
            "project": settings.team_project,
            "emailResult": email_result,
        }).model_dump()

    return [send_notification]
