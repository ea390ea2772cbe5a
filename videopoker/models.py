from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .cards import Card
from .evaluator import HandRank
from .strategy import DEFAULT_TOP


@dataclass
class EngineConfig:
    session_ttl_seconds: float = 60 * 60
    reap_interval_seconds: float = 60
    seeded_shuffle: bool = True
    strategy_top: int = DEFAULT_TOP
    debug: bool = False


@dataclass(frozen=True)
class Evaluation:
    rank: HandRank
    multiplier: int
    payout: int
    winning_indices: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class DealResult:
    hand_id: str
    hand: Tuple[Card, ...]
    balance: int
    seed_commitment: str


@dataclass(frozen=True)
class DrawResult:
    hand_id: str
    hand: Tuple[Card, ...]
    evaluation: Evaluation
    balance: int
    seed: str
    nonce: int


@dataclass(frozen=True)
class AuditResult:
    valid: bool
    deck: Tuple[Card, ...]
    hand_id: Optional[str] = None
