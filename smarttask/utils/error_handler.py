"""Unified error handling for Smart Task graph nodes and capabilities."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Dict

LOGGER = logging.getLogger(__name__)

NodeFallback = Callable[[Dict[str, Any], Exception], Dict[str, Any]]


class SmartTaskError(Exception):
    """Base exception for Smart Task errors."""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class ModelInvocationError(SmartTaskError):
    """Error during oracle invocation."""
    pass


class CapabilityExecutionError(SmartTaskError):
    """Error raised inside a capability or one of its clients."""
    pass


class ConfigurationError(SmartTaskError):
    """Missing or invalid configuration."""
    pass


class InvalidInputError(SmartTaskError):
    """Objective, mode or context rejected at the run boundary."""
    pass


def describe_error(error: Exception) -> str:
    """Return the message used when recording an error in step outcomes."""
    return str(error) or type(error).__name__


def with_error_boundary(node_name: str, fallback: NodeFallback):
    """Decorator to add an error boundary to graph nodes.

    Any exception raised by the node is logged and converted into the state
    delta returned by ``fallback(state, error)``.

    Example:
        @with_error_boundary("executor", _record_failed_step)
        async def executor_node(state: TaskState) -> dict:
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def sync_wrapper(state: Dict[str, Any]) -> Dict[str, Any]:
            try:
                return func(state)
            except ModelInvocationError as e:
                LOGGER.error(f"{node_name} model error: {e}")
                return fallback(state, e)
            except Exception as e:
                LOGGER.exception(f"{node_name} unexpected error", exc_info=e)
                return fallback(state, e)

        @functools.wraps(func)
        async def async_wrapper(state: Dict[str, Any]) -> Dict[str, Any]:
            try:
                return await func(state)
            except ModelInvocationError as e:
                LOGGER.error(f"{node_name} model error: {e}")
                return fallback(state, e)
            except Exception as e:
                LOGGER.exception(f"{node_name} unexpected error", exc_info=e)
                return fallback(state, e)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def safe_capability(capability_name: str):
    """Decorator for capability bodies: exceptions become failed ToolResults.

    Example:
        @tool
        @safe_capability("read_file")
        async def read_file(path: str) -> dict:
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Dict[str, Any]:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                LOGGER.warning(f"Capability {capability_name} failed: {e}")
                return {
                    "name": capability_name,
                    "result": None,
                    "success": False,
                    "error": describe_error(e),
                }
        return wrapper
    return decorator


def handle_model_error(error: Exception) -> str:
    """Convert oracle invocation errors to user-friendly messages."""
    error_str = str(error).lower()

    if "rate_limit" in error_str or "429" in error_str:
        return "Model rate limit exceeded, retry later"

    if "timeout" in error_str:
        return "Model request timed out"

    if "context_length" in error_str or "token" in error_str:
        return "Prompt exceeds the model context window"

    if "invalid_api_key" in error_str or "authentication" in error_str or "401" in error_str:
        return "Model credentials were rejected"

    if "quota" in error_str or "insufficient" in error_str:
        return "Model quota exhausted"

    return f"Model service unavailable: {str(error)}"
