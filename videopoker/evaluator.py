from __future__ import annotations

from collections import Counter
from enum import IntEnum
from typing import List, Sequence

from .cards import HAND_SIZE, Card, Rank
from .errors import InputSizeError

WHEEL = frozenset({Rank.ACE, Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE})


class HandRank(IntEnum):
    """Jacks or Better hand tiers, weakest first."""

    NOTHING = 0
    JACKS_OR_BETTER = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9


def evaluate(hand: Sequence[Card]) -> HandRank:
    """Classify a 5-card hand. The first matching tier (strongest first) wins."""
    _require_five(hand)
    ranks = [card.rank for card in hand]
    is_flush = len({card.suit for card in hand}) == 1
    is_straight = _is_straight(ranks)
    counts = sorted(Counter(ranks).values(), reverse=True)

    if is_flush and is_straight and Rank.ACE in ranks and Rank.KING in ranks:
        return HandRank.ROYAL_FLUSH
    if is_flush and is_straight:
        return HandRank.STRAIGHT_FLUSH
    if counts[0] == 4:
        return HandRank.FOUR_OF_A_KIND
    if counts == [3, 2]:
        return HandRank.FULL_HOUSE
    if is_flush:
        return HandRank.FLUSH
    if is_straight:
        return HandRank.STRAIGHT
    if counts[0] == 3:
        return HandRank.THREE_OF_A_KIND
    if counts[:2] == [2, 2]:
        return HandRank.TWO_PAIR
    if counts[0] == 2 and _pair_ranks(ranks)[0].is_high:
        return HandRank.JACKS_OR_BETTER
    return HandRank.NOTHING


def winning_positions(hand: Sequence[Card], rank: HandRank) -> List[int]:
    """Positions that make up ``rank``; used for highlighting only."""
    _require_five(hand)
    if rank == HandRank.NOTHING:
        return []
    if rank in (
        HandRank.ROYAL_FLUSH,
        HandRank.STRAIGHT_FLUSH,
        HandRank.FULL_HOUSE,
        HandRank.FLUSH,
        HandRank.STRAIGHT,
    ):
        return list(range(HAND_SIZE))

    counts = Counter(card.rank for card in hand)
    if rank == HandRank.FOUR_OF_A_KIND:
        matching = {r for r, c in counts.items() if c == 4}
    elif rank == HandRank.THREE_OF_A_KIND:
        matching = {r for r, c in counts.items() if c == 3}
    elif rank == HandRank.TWO_PAIR:
        matching = {r for r, c in counts.items() if c == 2}
    else:
        matching = {r for r, c in counts.items() if c == 2 and r.is_high}
    return [idx for idx, card in enumerate(hand) if card.rank in matching]


def _is_straight(ranks: Sequence[Rank]) -> bool:
    distinct = set(ranks)
    if len(distinct) != HAND_SIZE:
        return False
    # Ace plays low only in the wheel; it cannot wrap (Q-K-A-2-3 is no straight).
    if distinct == WHEEL:
        return True
    return max(distinct) - min(distinct) == HAND_SIZE - 1


def _pair_ranks(ranks: Sequence[Rank]) -> List[Rank]:
    return [rank for rank, count in Counter(ranks).items() if count == 2]


def _require_five(hand: Sequence[Card]) -> None:
    if len(hand) != HAND_SIZE:
        raise InputSizeError(f"Hand must contain exactly {HAND_SIZE} cards, got {len(hand)}")
