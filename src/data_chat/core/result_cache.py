"""
ResponseCache - answer caching with per-session LRU eviction.

Injected into the question service instead of living as module-level state.
Answers are stored per session, keyed by a run key derived from the normalized
question text and the datasets it was asked against. The cache is shared by
request threads, so every access holds one lock.
"""

import hashlib
import json
import threading
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

logger = structlog.get_logger()


@dataclass
class CachedResponse:
    """Represents a cached answer."""

    run_key: str
    question: str  # Normalized question text
    answer: str
    analyses: list[dict[str, Any]]  # Serializable per-dataset analysis summaries
    timestamp: datetime
    session_id: str


def make_run_key(normalized_question: str, dataset_ids: Sequence[str]) -> str:
    """
    Deterministic cache key for a question against a set of datasets.

    Args:
        normalized_question: Question after normalization (lowercase, single spaces)
        dataset_ids: Dataset ids the question is answered against (order-insensitive)

    Returns:
        Hex digest
    """
    payload = json.dumps({"q": normalized_question, "datasets": sorted(dataset_ids)}, sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:32]


class ResponseCache:
    """
    Answer cache, one LRU-ordered mapping per session (oldest first).

    Args:
        max_size: Answers kept per session; None never evicts (process lifetime)
    """

    def __init__(self, max_size: int | None = 50) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError(f"max_size must be >= 1 or None, got {max_size}")
        self._max_size = max_size
        self._sessions: dict[str, OrderedDict[str, CachedResponse]] = {}
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int | None:
        return self._max_size

    def get(self, run_key: str, session_id: str) -> CachedResponse | None:
        """Cached answer for a run key in a session; a hit becomes the most recent entry."""
        with self._lock:
            entries = self._sessions.get(session_id)
            if entries is None or run_key not in entries:
                return None
            entries.move_to_end(run_key)
            return entries[run_key]

    def put(self, cached: CachedResponse) -> None:
        """Store an answer as the most recent entry, evicting the oldest past max_size."""
        with self._lock:
            entries = self._sessions.setdefault(cached.session_id, OrderedDict())
            entries[cached.run_key] = cached
            entries.move_to_end(cached.run_key)
            while self._max_size is not None and len(entries) > self._max_size:
                evicted_key, _ = entries.popitem(last=False)
                logger.debug("answer_cache_evicted", session_id=cached.session_id, run_key=evicted_key)

    def clear(self, session_id: str | None = None) -> None:
        """Drop one session's answers, or every session's when session_id is None."""
        with self._lock:
            if session_id is None:
                self._sessions = {}
            else:
                self._sessions.pop(session_id, None)

    def serialize(self) -> dict[str, Any]:
        """
        Serialize cache state to a dict for persistence.

        Each session's answers are listed oldest first, so LRU order survives a round trip.
        """
        with self._lock:
            return {
                "results": {
                    session_id: [
                        {
                            "run_key": result.run_key,
                            "question": result.question,
                            "answer": result.answer,
                            "analyses": result.analyses,
                            "timestamp": result.timestamp.isoformat(),
                            "session_id": result.session_id,
                        }
                        for result in entries.values()
                    ]
                    for session_id, entries in self._sessions.items()
                },
                "max_size": self._max_size,
            }

    @classmethod
    def deserialize(cls, data: dict[str, Any]) -> "ResponseCache":
        """Restore a cache from serialize() output."""
        cache = cls(max_size=data.get("max_size", 50))
        for session_id, results in data.get("results", {}).items():
            cache._sessions[session_id] = OrderedDict(
                (
                    item["run_key"],
                    CachedResponse(
                        run_key=item["run_key"],
                        question=item["question"],
                        answer=item["answer"],
                        analyses=item.get("analyses", []),
                        timestamp=datetime.fromisoformat(item["timestamp"]),
                        session_id=item["session_id"],
                    ),
                )
                for item in results
            )
        return cache
