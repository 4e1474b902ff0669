"""Message models for chat requests and responses."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class MessageRole(str, Enum):
    """Message sender role."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatTurn(BaseModel):
    """One turn of a conversation as sent to the provider."""

    role: MessageRole
    content: str

    def to_provider(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ChatRequest(BaseModel):
    """Body of ``POST /api/chat`` and ``POST /api/chat/stream``.

    ``message`` is left loosely typed so that a missing or non-string value
    is reported as ``Invalid message`` rather than a schema error.
    """

    message: Any = None
    history: Optional[list[ChatTurn]] = None

    def text(self) -> Optional[str]:
        """Return the message if it is a non-empty string, else None."""
        if isinstance(self.message, str) and self.message:
            return self.message
        return None


class ChatReply(BaseModel):
    """Successful single-shot chat response."""

    reply: str
