"""Recover JSON payloads from model responses wrapped in markdown fences."""

from __future__ import annotations

import json
import re
from typing import Any

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")


def extract_json(content: str) -> str:
    """Return the best-effort JSON substring of ``content``.

    Priority: a ```json fenced block, then any fenced block, then the raw text.
    Never raises; parse failures are the caller's concern.
    """
    if not isinstance(content, str):
        return str(content)

    if "```json" in content:
        match = _JSON_FENCE.search(content)
        if match:
            return match.group(1)
    elif "```" in content:
        match = _ANY_FENCE.search(content)
        if match:
            return match.group(1)

    return content


def parse_json_response(content: str) -> Any:
    """Extract and decode a JSON payload. Raises ``json.JSONDecodeError``."""
    return json.loads(extract_json(content))
