"""Utility helpers (JSON extraction, logging, error handling)."""

from .json_extract import extract_json, parse_json_response
from .logging_utils import (
    log_error,
    log_node_entry,
    log_node_exit,
    log_plan_created,
    log_prompt,
    log_routing_decision,
    log_step_execution,
    log_tool_call,
    log_tool_result,
    preview,
    setup_logging,
)

__all__ = [
    "extract_json",
    "parse_json_response",
    "log_error",
    "log_node_entry",
    "log_node_exit",
    "log_plan_created",
    "log_prompt",
    "log_routing_decision",
    "log_step_execution",
    "log_tool_call",
    "log_tool_result",
    "preview",
    "setup_logging",
]
