"""Helpers that call the language-model oracle."""

from __future__ import annotations

from typing import Any, List, Optional

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from smarttask.utils.error_handler import ModelInvocationError, handle_model_error

from .interfaces import Oracle


def message_text(message: Any) -> str:
    """Normalise a chat model reply (string or content-part list) to text."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


def build_messages(system_prompt: str, content: Optional[str] = None) -> List[BaseMessage]:
    messages: List[BaseMessage] = [SystemMessage(content=system_prompt)]
    if content is not None:
        messages.append(HumanMessage(content=content))
    return messages


async def invoke_oracle(model: Oracle, system_prompt: str, content: Optional[str] = None) -> str:
    """Send one system instruction (plus optional user content) and return the reply text.

    Raises:
        ModelInvocationError: the model call itself failed.
    """
    try:
        reply = await model.ainvoke(build_messages(system_prompt, content))
    except Exception as e:
        raise ModelInvocationError(str(e) or type(e).__name__, user_message=handle_model_error(e)) from e
    return message_text(reply)
