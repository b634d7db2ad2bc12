"""Runtime utilities."""

from .app import build_application, create_capability_registry
from .context import build_context, parse_additional_context
from .model_resolver import build_chat_model
from .result import ResultBuilder, TaskResult

__all__ = [
    "build_application",
    "create_capability_registry",
    "build_context",
    "parse_additional_context",
    "build_chat_model",
    "ResultBuilder",
    "TaskResult",
]
