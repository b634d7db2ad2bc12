"""Initial run context assembly."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

from smarttask.graph.modes import TaskMode, parse_mode

LOGGER = logging.getLogger("smarttask.context")

AdditionalContext = Union[Mapping[str, Any], str, None]


def parse_additional_context(raw: AdditionalContext) -> Dict[str, Any]:
    """Accept a mapping or a JSON object string; anything else yields ``{}``."""
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        LOGGER.warning(f"Failed to parse additional context: {e}")
        return {}
    if not isinstance(parsed, dict):
        LOGGER.warning(f"Additional context must be a JSON object, got {type(parsed).__name__}")
        return {}
    return parsed


def build_context(
    mode: Union[TaskMode, str],
    additional: AdditionalContext = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Return ``{mode, timestamp}`` overlaid with caller context; ``mode`` always wins."""
    task_mode = parse_mode(mode)
    context: Dict[str, Any] = {
        "timestamp": (now or datetime.now(timezone.utc)).isoformat(),
    }
    context.update(parse_additional_context(additional))
    context["mode"] = task_mode.value
    return context
