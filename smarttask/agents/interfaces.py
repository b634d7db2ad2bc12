"""Shared agent interfaces."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from langchain_core.messages import BaseMessage


class Oracle(Protocol):
    """Anything exposing LangChain's async chat-model call."""

    async def ainvoke(self, input: Sequence[BaseMessage], **kwargs: Any) -> Any:
        ...
