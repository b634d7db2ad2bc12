"""Oracle helpers."""

from .factory import build_messages, invoke_oracle, message_text
from .interfaces import Oracle

__all__ = ["build_messages", "invoke_oracle", "message_text", "Oracle"]
