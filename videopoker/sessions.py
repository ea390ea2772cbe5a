from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Protocol, Tuple

from .cards import DECK_SIZE, Card

LOGGER = logging.getLogger("videopoker.sessions")

DEFAULT_TTL_SECONDS = 60 * 60


class SessionState(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class HandSession:
    # Server-side record of one hand. The deck and seed never leave the
    # server until the hand is completed.
    hand_id: str
    deck: Tuple[Card, ...]
    dealt: Tuple[Card, ...]
    cursor: int
    bet: int
    seed: str
    nonce: int
    commitment: str
    created_at: float
    completed: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.cursor <= len(self.deck) <= DECK_SIZE:
            raise ValueError(f"Cursor {self.cursor} outside deck of {len(self.deck)}")

    def age(self, now: float) -> float:
        return now - self.created_at

    def state(self, now: float, ttl_seconds: float) -> SessionState:
        if self.age(now) > ttl_seconds:
            return SessionState.EXPIRED
        if self.completed:
            return SessionState.COMPLETED
        return SessionState.ACTIVE


class SessionStore(Protocol):
    """Storage port for hand sessions (in-process map or a TTL key-value store)."""

    def get(self, hand_id: str) -> Optional[HandSession]: ...

    def put(self, session: HandSession) -> None: ...

    def compare_and_set(self, hand_id: str, expected: HandSession, updated: HandSession) -> bool:
        """Replace the record only if it still equals ``expected``. Must be atomic."""
        ...

    def delete(self, hand_id: str) -> bool: ...

    def purge_expired(self, now: float) -> int: ...

    def __len__(self) -> int: ...


class InMemorySessionStore:
    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, HandSession] = {}
        self._lock = threading.Lock()

    def get(self, hand_id: str) -> Optional[HandSession]:
        with self._lock:
            return self._sessions.get(hand_id)

    def put(self, session: HandSession) -> None:
        with self._lock:
            self._sessions[session.hand_id] = session
            total = len(self._sessions)
        LOGGER.debug("Stored session %s (total=%s)", session.hand_id, total)

    def compare_and_set(self, hand_id: str, expected: HandSession, updated: HandSession) -> bool:
        with self._lock:
            current = self._sessions.get(hand_id)
            if current is None or current != expected:
                return False
            self._sessions[hand_id] = updated
            return True

    def delete(self, hand_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(hand_id, None)
        if removed is not None:
            LOGGER.debug("Deleted session %s", hand_id)
        return removed is not None

    def purge_expired(self, now: float) -> int:
        with self._lock:
            expired = [
                hand_id
                for hand_id, session in self._sessions.items()
                if session.age(now) > self.ttl_seconds
            ]
            for hand_id in expired:
                del self._sessions[hand_id]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
