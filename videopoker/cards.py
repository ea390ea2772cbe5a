from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, List, Sequence

from .errors import ValidationError

HAND_SIZE = 5
DECK_SIZE = 52


class Suit(str, Enum):
    # Declaration order is the canonical deck order; the seeded shuffle
    # permutes exactly this order.
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"
    SPADES = "S"


class Rank(IntEnum):
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def code(self) -> str:
        return _RANK_CODES[self]

    @property
    def is_high(self) -> bool:
        return self >= Rank.JACK

    @classmethod
    def from_code(cls, code: str) -> "Rank":
        try:
            return _CODE_RANKS[code.upper()]
        except KeyError:
            raise ValidationError(f"Invalid rank: {code}", "INVALID_CARD") from None


_RANK_CODES = {rank: (str(rank.value) if rank <= Rank.TEN else rank.name[0]) for rank in Rank}
_CODE_RANKS = {code: rank for rank, code in _RANK_CODES.items()}


@dataclass(frozen=True)
class Card:
    rank: Rank
    suit: Suit

    def __post_init__(self) -> None:
        if not isinstance(self.rank, Rank):
            raise ValidationError(f"Invalid rank: {self.rank}", "INVALID_CARD")
        if not isinstance(self.suit, Suit):
            raise ValidationError(f"Invalid suit: {self.suit}", "INVALID_CARD")

    @property
    def code(self) -> str:
        return f"{self.rank.code}{self.suit.value}"

    def __str__(self) -> str:
        return self.code


def create_deck() -> List[Card]:
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def parse_card(code: str) -> Card:
    if not isinstance(code, str) or not 2 <= len(code) <= 3:
        raise ValidationError(
            f'Invalid card format: {code}. Expected format like "AS", "10H"',
            "INVALID_CARD",
        )
    try:
        suit = Suit(code[-1].upper())
    except ValueError:
        raise ValidationError(f"Invalid suit: {code[-1]}", "INVALID_CARD") from None
    return Card(Rank.from_code(code[:-1]), suit)


def parse_cards(codes: Iterable[str]) -> List[Card]:
    return [parse_card(code) for code in codes]


def cards_to_codes(cards: Sequence[Card]) -> List[str]:
    return [card.code for card in cards]
