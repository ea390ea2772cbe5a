"""9/6 Jacks or Better pay table.

Full House pays 9 and Flush pays 6 per credit. A Royal Flush pays 250 per
credit, or 800 per credit when played at the maximum bet.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .errors import ValidationError
from .evaluator import HandRank

MIN_BET = 1
MAX_BET = 5
ROYAL_MAX_BET_MULTIPLIER = 800

MULTIPLIERS: Dict[HandRank, int] = {
    HandRank.ROYAL_FLUSH: 250,
    HandRank.STRAIGHT_FLUSH: 50,
    HandRank.FOUR_OF_A_KIND: 25,
    HandRank.FULL_HOUSE: 9,
    HandRank.FLUSH: 6,
    HandRank.STRAIGHT: 4,
    HandRank.THREE_OF_A_KIND: 3,
    HandRank.TWO_PAIR: 2,
    HandRank.JACKS_OR_BETTER: 1,
    HandRank.NOTHING: 0,
}

HAND_NAMES: Dict[HandRank, str] = {
    HandRank.ROYAL_FLUSH: "Royal Flush",
    HandRank.STRAIGHT_FLUSH: "Straight Flush",
    HandRank.FOUR_OF_A_KIND: "Four of a Kind",
    HandRank.FULL_HOUSE: "Full House",
    HandRank.FLUSH: "Flush",
    HandRank.STRAIGHT: "Straight",
    HandRank.THREE_OF_A_KIND: "Three of a Kind",
    HandRank.TWO_PAIR: "Two Pair",
    HandRank.JACKS_OR_BETTER: "Jacks or Better",
    HandRank.NOTHING: "No Win",
}


def validate_bet(bet: object) -> int:
    if isinstance(bet, bool) or not isinstance(bet, int) or not MIN_BET <= bet <= MAX_BET:
        raise ValidationError(
            f"Invalid bet amount. Must be {MIN_BET}-{MAX_BET} credits.", "INVALID_BET"
        )
    return bet


def multiplier(rank: HandRank, bet: int) -> int:
    validate_bet(bet)
    if rank == HandRank.ROYAL_FLUSH and bet == MAX_BET:
        return ROYAL_MAX_BET_MULTIPLIER
    return MULTIPLIERS[rank]


def payout(rank: HandRank, bet: int) -> int:
    return multiplier(rank, bet) * bet


def hand_name(rank: HandRank) -> str:
    return HAND_NAMES[rank]


def pay_table_rows() -> List[Tuple[str, List[int]]]:
    rows = []
    for rank in sorted(MULTIPLIERS, reverse=True):
        if rank == HandRank.NOTHING:
            continue
        rows.append((hand_name(rank), [payout(rank, bet) for bet in range(MIN_BET, MAX_BET + 1)]))
    return rows
