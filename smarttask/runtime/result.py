"""Run result model."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel


class TaskResult(BaseModel):
    success: bool
    response: Optional[str] = None
    error: Optional[str] = None


class ResultBuilder:
    """Translate a final graph state or a caught error into a TaskResult."""

    @staticmethod
    def build(final_state: Mapping[str, Any]) -> TaskResult:
        response = final_state.get("response")
        if response:
            return TaskResult(success=True, response=response)
        return TaskResult(success=True)

    @staticmethod
    def failure(error: Exception) -> TaskResult:
        message = getattr(error, "user_message", None) or str(error) or type(error).__name__
        return TaskResult(success=False, error=message)
