from __future__ import annotations

import logging
import string
import time
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from .cards import HAND_SIZE, Card, create_deck
from .errors import (
    DeckExhaustionError,
    SessionCompletedError,
    SessionExpiredError,
    SessionNotFoundError,
    ValidationError,
)
from .evaluator import evaluate, winning_positions
from .fairness import combine, commit, generate_hand_id, generate_nonce, generate_seed, verify
from .models import AuditResult, DealResult, DrawResult, EngineConfig, Evaluation
from .paytable import MAX_BET, multiplier, payout, validate_bet
from .sessions import HandSession, InMemorySessionStore, SessionState, SessionStore
from .shuffle import secure_shuffle, seeded_shuffle
from .strategy import HoldStrategy, analyze_hand

LOGGER = logging.getLogger("videopoker.game")

HEX_DIGITS = frozenset(string.hexdigits)

# GameEngine owns the hand lifecycle: deal creates a session holding the
# secret deck, draw consumes it exactly once. No networking lives here.


class GameEngine:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        store: Optional[SessionStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or EngineConfig()
        self.store = store if store is not None else InMemorySessionStore(self.config.session_ttl_seconds)
        self.clock = clock

    # Deal ------------------------------------------------------------

    def deal(self, bet: int, balance: int) -> DealResult:
        validate_bet(bet)
        _validate_balance(balance)
        if balance < bet:
            raise ValidationError("Insufficient balance", "INSUFFICIENT_BALANCE")

        seed = generate_seed()
        nonce = generate_nonce()
        # The commitment exists before the deck does.
        commitment = commit(seed, nonce)
        deck = self._shuffled_deck(combine(seed, nonce))

        now = self.clock()
        session = HandSession(
            hand_id=generate_hand_id(now),
            deck=tuple(deck),
            dealt=tuple(deck[:HAND_SIZE]),
            cursor=HAND_SIZE,
            bet=bet,
            seed=seed,
            nonce=nonce,
            commitment=commitment,
            created_at=now,
        )
        self.store.put(session)
        LOGGER.info("Dealt hand %s bet=%s", session.hand_id, bet)
        return DealResult(
            hand_id=session.hand_id,
            hand=session.dealt,
            balance=balance - bet,
            seed_commitment=commitment,
        )

    def _shuffled_deck(self, key: str) -> List[Card]:
        if self.config.seeded_shuffle:
            return seeded_shuffle(create_deck(), key)
        return secure_shuffle(create_deck())

    # Draw ------------------------------------------------------------

    def draw(self, hand_id: str, held: Sequence[bool], balance: int) -> DrawResult:
        _validate_hand_id(hand_id)
        _validate_held(held)
        _validate_balance(balance)
        session = self._load(hand_id, SessionState.ACTIVE)

        hand = list(session.dealt)
        cursor = session.cursor
        # Replacements come off the deck strictly in the order fixed at deal.
        for idx, keep in enumerate(held):
            if keep:
                continue
            if cursor >= len(session.deck):
                LOGGER.error("Deck exhausted for hand %s at cursor %s", hand_id, cursor)
                raise DeckExhaustionError("Not enough cards in deck")
            hand[idx] = session.deck[cursor]
            cursor += 1

        rank = evaluate(hand)
        evaluation = Evaluation(
            rank=rank,
            multiplier=multiplier(rank, session.bet),
            payout=payout(rank, session.bet),
            winning_indices=winning_positions(hand, rank),
        )

        completed = replace(session, cursor=cursor, completed=True)
        if not self.store.compare_and_set(hand_id, session, completed):
            # Another draw got there first, or the record was reaped meanwhile.
            LOGGER.warning("Lost completion race for hand %s", hand_id)
            self._load(hand_id, SessionState.ACTIVE)
            raise SessionCompletedError("Hand already completed - cannot replay", hand_id)

        LOGGER.info("Drew hand %s rank=%s payout=%s", hand_id, rank.name, evaluation.payout)
        return DrawResult(
            hand_id=hand_id,
            hand=tuple(hand),
            evaluation=evaluation,
            balance=balance + evaluation.payout,
            seed=session.seed,
            nonce=session.nonce,
        )

    # Audit -----------------------------------------------------------

    def audit(self, seed: str, nonce: int, commitment: str, hand_id: Optional[str] = None) -> AuditResult:
        """Check a revealed seed against its commitment and replay the shuffle.

        With ``hand_id`` the hand must be completed; a successful check
        destroys its session since nothing about it is secret any more.
        """
        if not isinstance(seed, str) or not seed:
            raise ValidationError("Seed must be a non-empty string", "INVALID_SEED")
        try:
            seed.encode("utf-8")
        except UnicodeEncodeError:
            raise ValidationError("Seed must be valid UTF-8 text", "INVALID_SEED") from None
        if isinstance(nonce, bool) or not isinstance(nonce, int) or nonce < 0:
            raise ValidationError("Nonce must be a non-negative integer", "INVALID_NONCE")
        if not isinstance(commitment, str) or len(commitment) != 64 or not set(commitment) <= HEX_DIGITS:
            raise ValidationError("Commitment must be a 64-character hex string", "INVALID_COMMITMENT")

        valid = verify(seed, nonce, commitment)
        if hand_id is not None:
            _validate_hand_id(hand_id)
            session = self._load(hand_id, SessionState.COMPLETED)
            valid = valid and session.commitment == commitment.lower()
            if valid:
                self.store.delete(hand_id)
                LOGGER.info("Hand %s verified and released", hand_id)

        deck = tuple(seeded_shuffle(create_deck(), combine(seed, nonce)))
        return AuditResult(valid=valid, deck=deck, hand_id=hand_id)

    # Strategy --------------------------------------------------------

    def analyze(self, hand: Sequence[Card], bet: Optional[int] = None, top: Optional[int] = None) -> List[HoldStrategy]:
        return analyze_hand(
            hand,
            bet=MAX_BET if bet is None else validate_bet(bet),
            top=self.config.strategy_top if top is None else top,
        )

    # Housekeeping ----------------------------------------------------

    def purge_expired(self) -> int:
        removed = self.store.purge_expired(self.clock())
        if removed:
            LOGGER.info("Purged %s expired sessions", removed)
        return removed

    def active_sessions(self) -> int:
        return len(self.store)

    def _load(self, hand_id: str, wanted: SessionState) -> HandSession:
        session = self.store.get(hand_id)
        if session is None:
            raise SessionNotFoundError("Session not found", hand_id)
        state = session.state(self.clock(), self.config.session_ttl_seconds)
        if state == SessionState.EXPIRED:
            self.store.delete(hand_id)
            raise SessionExpiredError("Hand session expired", hand_id)
        if state != wanted:
            if state == SessionState.COMPLETED:
                raise SessionCompletedError("Hand already completed - cannot replay", hand_id)
            raise ValidationError("Hand must be completed before it can be verified", "HAND_NOT_COMPLETED")
        return session


def _validate_hand_id(hand_id: object) -> None:
    if not isinstance(hand_id, str) or not hand_id.strip():
        raise ValidationError("Invalid hand ID", "INVALID_HAND_ID")


def _validate_held(held: object) -> None:
    if not isinstance(held, (list, tuple)) or len(held) != HAND_SIZE:
        raise ValidationError(f"Hold array must contain exactly {HAND_SIZE} boolean values", "INVALID_HOLD")
    if not all(isinstance(flag, bool) for flag in held):
        raise ValidationError("All hold values must be boolean", "INVALID_HOLD")


def _validate_balance(balance: object) -> None:
    if isinstance(balance, bool) or not isinstance(balance, int) or balance < 0:
        raise ValidationError("Balance must be a non-negative integer", "INVALID_BALANCE")
