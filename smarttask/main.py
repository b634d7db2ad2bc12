"""Smart Task CLI entrypoint.

Usage:
    smarttask --prompt "Set build status to green if all tests passed" --mode decision

    smarttask --prompt "Clean the build output directory" --mode execution \\
        --context '{"outputDir": "dist"}'
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from smarttask.agent import TaskAgent
from smarttask.config import get_settings
from smarttask.graph import TaskMode
from smarttask.utils.logging_utils import setup_logging

LOGGER = logging.getLogger("smarttask.main")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="smarttask",
        description="Smart Task - plan, execute and replan a pipeline objective",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--prompt",
        type=str,
        required=True,
        help="Objective for the agent",
    )
    parser.add_argument(
        "--mode",
        type=str,
        required=True,
        choices=[mode.value for mode in TaskMode],
        help="decision: finish by setting a pipeline variable; execution: finish by running a command",
    )
    parser.add_argument(
        "--context",
        type=str,
        default="{}",
        help="Additional context as a JSON object string",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    level_name = args.log_level or settings.observability.log_level
    setup_logging(getattr(logging, level_name.upper(), logging.INFO), settings.observability.log_dir)

    agent = TaskAgent(settings=settings)
    result = await agent.execute(args.prompt, args.mode, args.context)

    if not result.success:
        print(f"Smart Task failed: {result.error}", file=sys.stderr)
        return 1

    if result.response:
        print(result.response)
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
