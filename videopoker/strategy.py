"""Exact expected-value hold analysis for Jacks or Better.

Every one of the 32 hold masks is scored by enumerating every possible
draw from the 47 unseen cards, so the EV figures are exact expectations
rather than simulation estimates.

Each enumerated hand is classified through a pair of lookup tables keyed
by prime products (one prime per rank, one per suit). The tables are
filled by running :func:`~videopoker.evaluator.evaluate` once per distinct
rank multiset, so the strategy engine cannot disagree with the evaluator.
Classification does not depend on card order, which lets the enumeration
skip rebuilding each positional hand.
"""

from __future__ import annotations

import itertools
from collections import Counter
from dataclasses import dataclass, field
from functools import lru_cache
from math import prod
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import HAND_SIZE, Card, Rank, Suit, create_deck
from .errors import InputSizeError, ValidationError
from .evaluator import HandRank, evaluate
from .paytable import HAND_NAMES, MAX_BET, multiplier

HOLD_MASKS = range(1 << HAND_SIZE)
DEFAULT_TOP = 3

RANK_PRIMES: Dict[Rank, int] = dict(zip(Rank, (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41)))
SUIT_PRIMES: Dict[Suit, int] = dict(zip(Suit, (2, 3, 5, 7)))
FLUSH_KEYS = frozenset(p**HAND_SIZE for p in SUIT_PRIMES.values())

OUTCOME_NAMES: Dict[HandRank, str] = {
    **HAND_NAMES,
    HandRank.JACKS_OR_BETTER: "High Pair",
    HandRank.NOTHING: "Nothing",
}


@dataclass(frozen=True)
class HoldStrategy:
    hold_mask: int
    hold_cards: Tuple[Card, ...]
    ev: float
    combinations: int
    most_likely: HandRank
    explanation: str
    outcome_counts: Dict[HandRank, int] = field(default_factory=dict, compare=False)

    @property
    def hold_indices(self) -> List[int]:
        return mask_indices(self.hold_mask)

    @property
    def ev_percent(self) -> float:
        return self.ev * 100

    @property
    def most_likely_outcome(self) -> str:
        return OUTCOME_NAMES[self.most_likely]


def analyze_hand(hand: Sequence[Card], bet: int = MAX_BET, top: int = DEFAULT_TOP) -> List[HoldStrategy]:
    """Return the ``top`` hold strategies for ``hand``, best expected value first."""
    if len(hand) != HAND_SIZE:
        raise InputSizeError(f"Hand must contain exactly {HAND_SIZE} cards, got {len(hand)}")
    if len(set(hand)) != HAND_SIZE:
        raise ValidationError("Hand contains duplicate cards", "DUPLICATE_CARD")
    pays = {rank: multiplier(rank, bet) for rank in HandRank}

    pool = draw_pool(hand)
    pool_ranks = [RANK_PRIMES[card.rank] for card in pool]
    pool_suits = [SUIT_PRIMES[card.suit] for card in pool]

    strategies = []
    for mask in HOLD_MASKS:
        counts = tally_outcomes(hand, mask, pool_ranks, pool_suits)
        total = sum(counts.values())
        ev = sum(pays[rank] * count for rank, count in counts.items()) / total
        most_likely = _most_likely(counts)
        strategies.append(
            HoldStrategy(
                hold_mask=mask,
                hold_cards=tuple(hand[idx] for idx in mask_indices(mask)),
                ev=ev,
                combinations=total,
                most_likely=most_likely,
                explanation=explain_hold(hand, mask, most_likely),
                outcome_counts=dict(counts),
            )
        )

    # list.sort is stable, so equal EVs keep mask order.
    strategies.sort(key=lambda strategy: strategy.ev, reverse=True)
    return strategies[:top]


def draw_pool(hand: Sequence[Card]) -> List[Card]:
    """Cards that can arrive on the draw: the deck minus all five dealt cards."""
    dealt = set(hand)
    return [card for card in create_deck() if card not in dealt]


def tally_outcomes(
    hand: Sequence[Card],
    mask: int,
    pool_ranks: Sequence[int],
    pool_suits: Sequence[int],
) -> Counter:
    """Count final-hand ranks over every draw for one hold mask."""
    held = [hand[idx] for idx in mask_indices(mask)]
    held_rank_key = prod(RANK_PRIMES[card.rank] for card in held)
    held_suit_key = prod(SUIT_PRIMES[card.suit] for card in held)
    draw_count = HAND_SIZE - len(held)

    # combinations() walks both sequences with the same index sets, so the
    # zipped products describe the same drawn cards.
    draws = Counter(
        zip(
            map(prod, itertools.combinations(pool_ranks, draw_count)),
            map(prod, itertools.combinations(pool_suits, draw_count)),
        )
    )

    unsuited, suited = _rank_tables()
    outcomes: Counter = Counter()
    for (rank_key, suit_key), count in draws.items():
        rank_key *= held_rank_key
        table = suited if suit_key * held_suit_key in FLUSH_KEYS else unsuited
        outcomes[table[rank_key]] += count
    return outcomes


def mask_indices(mask: int) -> List[int]:
    return [idx for idx in range(HAND_SIZE) if mask >> idx & 1]


def explain_hold(hand: Sequence[Card], mask: int, most_likely: HandRank) -> str:
    held = [hand[idx] for idx in mask_indices(mask)]
    draw_count = HAND_SIZE - len(held)
    if not held:
        return "Draw 5 new cards for the best chance at a winning hand"
    if draw_count == 0:
        current = evaluate(hand)
        if current == HandRank.NOTHING:
            return "Keep all five cards"
        return f"Keep your {OUTCOME_NAMES[current].lower()}"

    rank_counts = Counter(card.rank for card in held)
    pairs = [rank for rank, count in rank_counts.items() if count == 2]
    if pairs:
        if any(rank.is_high for rank in pairs):
            return f"Hold high pair for a guaranteed win, draw {draw_count} to improve"
        return f"Hold low pair, draw {draw_count} for three or four of a kind potential"

    if len(held) == 4 and len({card.suit for card in held}) == 1:
        return "Hold 4-card flush draw for a 9 in 47 (19.1%) chance of a flush"

    if len(held) == 4 and len(rank_counts) == 4:
        gap = _run_gap(list(rank_counts))
        if gap == 0:
            return "Hold open-ended straight draw, 8 cards complete it"
        if gap is not None:
            return "Hold inside straight draw, 4 cards complete it"

    if len(rank_counts) == len(held) and all(card.rank.is_high for card in held):
        return "Hold high cards for pair potential"

    noun = "card" if draw_count == 1 else "cards"
    return f"Draw {draw_count} {noun} for {OUTCOME_NAMES[most_likely].lower()}"


def _run_gap(ranks: List[Rank]) -> Optional[int]:
    """0 for an open-ended 4-card run, 1 when only one rank completes it, else None."""
    values = sorted(int(rank) for rank in ranks)
    candidates = [values]
    if Rank.ACE in ranks:
        candidates.append(sorted(1 if value == Rank.ACE else value for value in values))
    best: Optional[int] = None
    for run in candidates:
        span = run[-1] - run[0]
        if span > 4:
            continue
        # A run touching either end of the ladder can only be filled one way.
        gap = 0 if span == 3 and run[0] > 1 and run[-1] < 14 else 1
        best = gap if best is None else min(best, gap)
    return best


def _most_likely(counts: Counter) -> HandRank:
    best: Optional[HandRank] = None
    for rank in sorted(HandRank, reverse=True):
        if rank == HandRank.NOTHING or counts.get(rank, 0) == 0:
            continue
        if best is None or counts[rank] > counts[best]:
            best = rank
    if best is not None:
        return best
    return max(counts, key=counts.__getitem__)


@lru_cache(maxsize=None)
def _rank_tables() -> Tuple[Dict[int, HandRank], Dict[int, HandRank]]:
    suits = list(Suit)
    unsuited: Dict[int, HandRank] = {}
    suited: Dict[int, HandRank] = {}
    for ranks in itertools.combinations_with_replacement(Rank, HAND_SIZE):
        counts = Counter(ranks)
        if max(counts.values()) > len(suits):
            continue
        key = prod(RANK_PRIMES[rank] for rank in ranks)
        if len(counts) == HAND_SIZE:
            # Distinct ranks: one off-suit card keeps it from being a flush.
            mixed = [Card(rank, suits[idx % len(suits)]) for idx, rank in enumerate(ranks)]
            unsuited[key] = evaluate(mixed)
            suited[key] = evaluate([Card(rank, suits[0]) for rank in ranks])
        else:
            seen: Counter = Counter()
            cards = []
            for rank in ranks:
                cards.append(Card(rank, suits[seen[rank]]))
                seen[rank] += 1
            unsuited[key] = evaluate(cards)
    return unsuited, suited
