"""Logging utilities for Smart Task."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

DEFAULT_PREVIEW_LENGTH = 200


def preview(text: Any, limit: int = DEFAULT_PREVIEW_LENGTH) -> str:
    text = str(text)
    if len(text) > limit:
        return text[:limit] + "... (truncated)"
    return text


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Setup logging configuration for Smart Task.

    Args:
        level: Console logging level (default: INFO)
        log_dir: Directory for the detailed log file (default: ./logs)

    Returns:
        Configured logger instance
    """
    logs_dir = Path(log_dir or "logs")
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"smarttask_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    logger = logging.getLogger("smarttask")
    logger.setLevel(logging.DEBUG)  # Capture all child logs, handlers filter
    logger.propagate = False

    logger.handlers = []

    # File handler (detailed logs)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    # Console handler (user-friendly)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("Smart Task session started")
    logger.info(f"Log file: {log_file}")
    logger.info("=" * 80)

    return logger


def log_node_entry(logger: logging.Logger, node_name: str, state: Dict[str, Any]) -> None:
    """Log node entry with a snapshot of the execution state."""
    context = state.get("context") or {}
    logger.info(f"\n{'#'*80}")
    logger.info(f"# ENTERING NODE: {node_name}")
    logger.info(f"{'#'*80}")
    logger.info("State snapshot:")
    logger.info(f"  - mode: {context.get('mode')}")
    logger.info(f"  - plan: {len(state.get('plan') or [])} remaining steps")
    logger.info(f"  - past_steps: {len(state.get('past_steps') or [])} completed")
    logger.info(f"  - response: {'set' if state.get('response') else 'unset'}")


def log_node_exit(logger: logging.Logger, node_name: str, updates: Dict[str, Any]) -> None:
    """Log node exit with the delta it produced."""
    logger.info(f"\n{'#'*80}")
    logger.info(f"# EXITING NODE: {node_name}")
    logger.info(f"{'#'*80}")
    logger.info("State updates:")
    for key, value in updates.items():
        if key == "past_steps":
            logger.info(f"  - past_steps: +{len(value)} new entries")
        elif key == "plan":
            logger.info(f"  - plan: {len(value)} steps")
        else:
            logger.info(f"  - {key}: {preview(value)}")
    logger.info(f"{'#'*80}\n")


def log_prompt(logger: logging.Logger, phase: str, prompt: str, max_length: int = 500) -> None:
    """Log the system prompt used for a phase (truncated)."""
    logger.info(f"System prompt for {phase} ({len(prompt)} chars):")
    logger.debug(preview(prompt, max_length))


def log_routing_decision(logger: logging.Logger, from_node: str, decision: str, reason: str = "") -> None:
    """Log a routing decision."""
    logger.info(f"Routing decision from {from_node}: → {decision}")
    if reason:
        logger.info(f"  → Reason: {reason}")


def log_plan_created(logger: logging.Logger, source: str, plan: Sequence[str]) -> None:
    """Log the step list produced by the planner or replanner."""
    logger.info(f"\n{'='*80}")
    logger.info(f"Plan from {source} ({len(plan)} steps):")
    for i, step in enumerate(plan, 1):
        logger.info(f"  {i}. {step}")
    logger.info(f"{'='*80}\n")


def log_step_execution(logger: logging.Logger, step_number: int, total: int, step: str) -> None:
    """Log the step about to be executed."""
    logger.info(f"\n{'='*80}")
    logger.info(f"Executing step {step_number} of {total}:")
    logger.info(f"  {step}")
    logger.info(f"{'='*80}\n")


def log_tool_call(logger: logging.Logger, tool_name: str, tool_input: Any) -> None:
    """Log a capability invocation."""
    logger.info(f"Tool call: {tool_name}")
    logger.debug(f"  Input: {json.dumps(tool_input, ensure_ascii=False, default=str)}")


def log_tool_result(logger: logging.Logger, tool_name: str, result: Any, success: bool = True) -> None:
    """Log a capability result."""
    status = "✓ Success" if success else "✗ Failed"
    logger.info(f"Tool result: {tool_name} - {status}")
    logger.debug(f"  Result: {preview(result, 500)}")


def log_past_steps(logger: logging.Logger, past_steps: List[Tuple[str, str]], last: int = 2) -> None:
    """Log the most recent completed steps."""
    for step, outcome in past_steps[-last:]:
        logger.info(f'  "{step}" → "{preview(outcome)}"')


def log_error(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """Log error with context and traceback."""
    logger.error(f"Error occurred: {type(error).__name__}: {str(error)}")
    if context:
        logger.error(f"  Context: {context}")
    logger.debug("Full traceback:", exc_info=error)
