import pytest

from videopoker.cards import Card, Rank, Suit, cards_to_codes, create_deck, parse_card
from videopoker.errors import ValidationError


def test_create_deck_has_52_unique_cards_in_canonical_order():
    deck = create_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52
    assert cards_to_codes(deck[:3]) == ["2H", "3H", "4H"]
    assert deck[12].code == "AH"
    assert deck[13].code == "2D"
    assert deck[-1].code == "AS"


def test_card_codes_cover_ten_and_faces():
    assert Card(Rank.TEN, Suit.CLUBS).code == "10C"
    assert str(Card(Rank.QUEEN, Suit.SPADES)) == "QS"
    assert Rank.JACK.is_high
    assert not Rank.TEN.is_high


def test_parse_card_is_case_insensitive():
    assert parse_card("as") == Card(Rank.ACE, Suit.SPADES)
    assert parse_card("10h") == Card(Rank.TEN, Suit.HEARTS)
    assert parse_card("Jd") == Card(Rank.JACK, Suit.DIAMONDS)


@pytest.mark.parametrize("code", ["", "A", "1H", "11H", "AX", "TH", "100H", None])
def test_parse_card_rejects_malformed_codes(code):
    with pytest.raises(ValidationError) as excinfo:
        parse_card(code)
    assert excinfo.value.code == "INVALID_CARD"


def test_card_requires_enum_members():
    with pytest.raises(ValidationError, match="Invalid rank"):
        Card(14, Suit.HEARTS)  # type: ignore[arg-type]
    with pytest.raises(ValidationError, match="Invalid suit"):
        Card(Rank.ACE, "H")  # type: ignore[arg-type]

