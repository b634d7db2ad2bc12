"""Shared state definition for the LangGraph flow."""

from __future__ import annotations

import operator
from typing import Annotated, Any, Dict, List, Optional, Tuple, TypedDict

PastStep = Tuple[str, str]


def merge_context(current: Optional[Dict[str, Any]], update: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Shallow-merge ``update`` over ``current``; an existing ``mode`` is kept."""
    merged = dict(current or {})
    for key, value in (update or {}).items():
        if key == "mode" and merged.get("mode") is not None and value != merged["mode"]:
            continue
        merged[key] = value
    return merged


class TaskState(TypedDict, total=False):
    """Execution state threaded through planner → executor → replanner.

    Nodes return partial updates; the channel reducers merge them:
    - past_steps: appended, never rewritten
    - context: shallow-merged, ``mode`` fixed after the first write
    - plan / response: replaced
    """

    # ========== Input ==========
    input: str

    # ========== Execution plan ==========
    plan: List[str]                                        # Remaining steps, head is next
    past_steps: Annotated[List[PastStep], operator.add]    # (step, outcome) in execution order

    # ========== Context ==========
    context: Annotated[Dict[str, Any], merge_context]

    # ========== Termination ==========
    response: Optional[str]
