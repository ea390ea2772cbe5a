from __future__ import annotations

from typing import List, Optional

from videopoker.cards import Card, create_deck, parse_cards
from videopoker.fairness import commit
from videopoker.game import GameEngine
from videopoker.models import EngineConfig
from videopoker.sessions import HandSession

STAGED_SEED = "ab" * 32
STAGED_NONCE = 7


class FakeClock:
    """Manually advanced clock so expiry can be tested without sleeping."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def cards(*codes: str) -> List[Card]:
    return parse_cards(codes)


def create_engine(*, clock: Optional[FakeClock] = None, **overrides) -> GameEngine:
    """Instantiate an engine with a fake clock and an empty in-memory store."""
    return GameEngine(EngineConfig(**overrides), clock=clock or FakeClock())


def stage_hand(
    engine: GameEngine,
    *codes: str,
    hand_id: str = "hand-1",
    bet: int = 5,
    cursor: int = 5,
) -> HandSession:
    """Store an active session whose deck starts with ``codes``.

    The first five codes are the dealt hand; any further codes are the
    next replacement cards, in order.
    """
    front = cards(*codes)
    deck = front + [card for card in create_deck() if card not in set(front)]
    session = HandSession(
        hand_id=hand_id,
        deck=tuple(deck),
        dealt=tuple(deck[:5]),
        cursor=cursor,
        bet=bet,
        seed=STAGED_SEED,
        nonce=STAGED_NONCE,
        commitment=commit(STAGED_SEED, STAGED_NONCE),
        created_at=engine.clock(),
    )
    engine.store.put(session)
    return session
