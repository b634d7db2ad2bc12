#!/usr/bin/env python3
"""Smart Task entrypoint.

Usage:
    python main.py --prompt "Set build status to green if all tests passed" --mode decision
"""

from smarttask.main import run

if __name__ == "__main__":
    run()
