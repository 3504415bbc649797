"""
ConversationManager - one session's chat transcript.

Messages are recorded only once a turn has an answer, so every stored message
is part of the history sent back to Gemini. Question normalization lives here
because cache keys and transcript lookups must agree on it.
"""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

__all__ = ["Message", "ConversationManager"]

Role = Literal["user", "assistant"]

# Gemini names the assistant side of a chat "model"
_GEMINI_ROLES = {"user": "user", "assistant": "model"}


@dataclass
class Message:
    """A single transcript entry."""

    id: str
    role: Role
    content: str
    timestamp: datetime
    run_key: str | None = None  # Cache entry the answer was stored under


class ConversationManager:
    """Ordered user/assistant messages for one session."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def add_message(self, role: Role, content: str, run_key: str | None = None) -> str:
        """
        Append a message.

        Args:
            role: "user" or "assistant"
            content: Message text
            run_key: Cache run key for assistant answers

        Returns:
            The new message id
        """
        message = Message(id=str(uuid4()), role=role, content=content, timestamp=datetime.now(UTC), run_key=run_key)
        self._messages.append(message)
        return message.id

    def get_transcript(self) -> list[Message]:
        """Messages in chronological order (a copy)."""
        return list(self._messages)

    def normalize_query(self, q: str | None) -> str:
        """Collapse whitespace and lowercase; None becomes the empty string."""
        if q is None:
            return ""
        return " ".join(q.split()).lower()

    def to_chat_history(self) -> list[dict[str, Any]]:
        """Transcript as Gemini chat history: [{"role": "user" | "model", "parts": [text]}]."""
        return [{"role": _GEMINI_ROLES[msg.role], "parts": [msg.content]} for msg in self._messages]

    def serialize(self) -> dict[str, Any]:
        messages = []
        for msg in self._messages:
            data = asdict(msg)
            data["timestamp"] = msg.timestamp.isoformat()
            messages.append(data)
        return {"messages": messages}

    @classmethod
    def deserialize(cls, data: dict[str, Any]) -> "ConversationManager":
        manager = cls()
        for item in data.get("messages", []):
            manager._messages.append(
                Message(
                    id=item["id"],
                    role=item["role"],
                    content=item["content"],
                    timestamp=datetime.fromisoformat(item["timestamp"]),
                    run_key=item.get("run_key"),
                )
            )
        return manager
