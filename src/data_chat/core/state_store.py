"""
SessionStore - Key-value persistence interface for chat sessions.

The presentation layer owns session bookkeeping; this module gives it a
pluggable store keyed by session id (in-memory, file-based, ...).
"""

import json
import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from data_chat.core.conversation_manager import ConversationManager


def generate_session_id() -> str:
    """Generate unique session ID.

    Format: sess_{random_hex}
    """
    return f"sess_{secrets.token_hex(8)}"


@dataclass
class SessionState:
    """Serializable chat session state."""

    session_id: str
    conversation: ConversationManager = field(default_factory=ConversationManager)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class SessionStore(ABC):
    """
    Abstract base class for session state persistence.

    Provides pluggable persistence backends (memory, file, ...).
    """

    @abstractmethod
    def get(self, session_id: str) -> SessionState | None:
        """
        Load session state.

        Args:
            session_id: Session identifier

        Returns:
            SessionState if found, None otherwise
        """

    @abstractmethod
    def put(self, state: SessionState) -> None:
        """
        Save session state (insert or replace).

        Args:
            state: SessionState to save
        """

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """
        Delete session state.

        Args:
            session_id: Session identifier

        Returns:
            True if a session was deleted, False if it did not exist
        """

    @abstractmethod
    def list_sessions(self) -> list[tuple[str, datetime]]:
        """
        List all saved sessions.

        Returns:
            List of tuples: (session_id, updated_at)
        """

    def get_or_create(self, session_id: str | None = None) -> SessionState:
        """Load a session, or create (and save) a new one if missing."""
        if session_id:
            state = self.get(session_id)
            if state is not None:
                return state
        state = SessionState(session_id=session_id or generate_session_id())
        self.put(state)
        return state


class InMemorySessionStore(SessionStore):
    """Process-lifetime session store (lost on restart)."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> SessionState | None:
        with self._lock:
            return self._sessions.get(session_id)

    def put(self, state: SessionState) -> None:
        with self._lock:
            self._sessions[state.session_id] = state

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list_sessions(self) -> list[tuple[str, datetime]]:
        with self._lock:
            return [(s.session_id, s.updated_at) for s in self._sessions.values()]


class FileSessionStore(SessionStore):
    """
    File-based session persistence backend.

    Stores state as JSON files in: {base_path}/{session_id}.json
    """

    def __init__(self, base_path: Path | str = Path("data/sessions")) -> None:
        """
        Initialize file-based session store.

        Args:
            base_path: Base directory for storing session files (default: data/sessions)
        """
        self.base_path = Path(base_path)

    def _get_file_path(self, session_id: str) -> Path:
        # Session ids are generated hex tokens; reject anything that could escape base_path
        if not session_id or any(ch in session_id for ch in "/\\."):
            raise ValueError(f"Invalid session id: {session_id!r}")
        return self.base_path / f"{session_id}.json"

    def get(self, session_id: str) -> SessionState | None:
        """
        Load session state from JSON file.

        Returns:
            SessionState if file exists and is valid, None otherwise
        """
        file_path = self._get_file_path(session_id)
        if not file_path.exists():
            return None

        try:
            with open(file_path) as f:
                data = json.load(f)

            return SessionState(
                session_id=data["session_id"],
                conversation=ConversationManager.deserialize(data["conversation"]),
                created_at=datetime.fromisoformat(data["created_at"]),
                updated_at=datetime.fromisoformat(data["updated_at"]),
            )
        except (json.JSONDecodeError, KeyError, ValueError):
            # Handle corrupt JSON or missing fields gracefully
            return None

    def put(self, state: SessionState) -> None:
        """Save session state to JSON file."""
        self.base_path.mkdir(parents=True, exist_ok=True)

        serialized = {
            "session_id": state.session_id,
            "conversation": state.conversation.serialize(),
            "created_at": state.created_at.isoformat(),
            "updated_at": state.updated_at.isoformat(),
        }

        with open(self._get_file_path(state.session_id), "w") as f:
            json.dump(serialized, f, indent=2)

    def delete(self, session_id: str) -> bool:
        file_path = self._get_file_path(session_id)
        if not file_path.exists():
            return False
        file_path.unlink()
        return True

    def list_sessions(self) -> list[tuple[str, datetime]]:
        """
        List all saved sessions.

        Returns:
            List of tuples: (session_id, updated_at)
        """
        if not self.base_path.exists():
            return []

        sessions = []
        for file_path in self.base_path.glob("*.json"):
            try:
                with open(file_path) as f:
                    data = json.load(f)
                sessions.append((data["session_id"], datetime.fromisoformat(data["updated_at"])))
            except (json.JSONDecodeError, KeyError, ValueError):
                # Skip corrupt files
                continue

        return sessions
