"""Jacks or Better engine primitives reused by the dealer server."""

from .cards import Card, Rank, Suit, create_deck, parse_card, parse_cards
from .errors import (
    DeckExhaustionError,
    ForbiddenError,
    InputSizeError,
    PokerError,
    SessionCompletedError,
    SessionError,
    SessionExpiredError,
    SessionNotFoundError,
    ValidationError,
)
from .evaluator import HandRank, evaluate, winning_positions
from .game import GameEngine
from .models import EngineConfig
from .sessions import HandSession, InMemorySessionStore, SessionStore
from .strategy import HoldStrategy, analyze_hand

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "create_deck",
    "parse_card",
    "parse_cards",
    "DeckExhaustionError",
    "ForbiddenError",
    "InputSizeError",
    "PokerError",
    "SessionCompletedError",
    "SessionError",
    "SessionExpiredError",
    "SessionNotFoundError",
    "ValidationError",
    "HandRank",
    "evaluate",
    "winning_positions",
    "GameEngine",
    "EngineConfig",
    "HandSession",
    "InMemorySessionStore",
    "SessionStore",
    "HoldStrategy",
    "analyze_hand",
]
