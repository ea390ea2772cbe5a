import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

import videopoker.game as game_module
from videopoker.cards import create_deck
from videopoker.errors import (
    DeckExhaustionError,
    SessionCompletedError,
    SessionExpiredError,
    SessionNotFoundError,
    ValidationError,
)
from videopoker.evaluator import HandRank
from videopoker.fairness import combine, commit
from videopoker.shuffle import seeded_shuffle

from .helpers import STAGED_NONCE, STAGED_SEED, FakeClock, cards, create_engine, stage_hand

HOLD_ALL = [True] * 5
DISCARD_ALL = [False] * 5


def test_deal_commits_before_revealing_cards():
    engine = create_engine()
    result = engine.deal(5, 100)

    assert result.balance == 95
    assert len(result.hand) == 5
    assert len(set(result.hand)) == 5

    session = engine.store.get(result.hand_id)
    assert session is not None
    assert session.cursor == 5
    assert session.dealt == result.hand
    assert result.seed_commitment == commit(session.seed, session.nonce)


def test_deal_uses_seeded_shuffle(monkeypatch):
    monkeypatch.setattr(game_module, "generate_seed", lambda: "11" * 32)
    monkeypatch.setattr(game_module, "generate_nonce", lambda: 99)
    engine = create_engine()

    result = engine.deal(1, 10)

    expected = seeded_shuffle(create_deck(), combine("11" * 32, 99))
    assert list(result.hand) == expected[:5]
    assert list(engine.store.get(result.hand_id).deck) == expected


def test_unseeded_deal_still_deals_a_full_deck():
    engine = create_engine(seeded_shuffle=False)
    result = engine.deal(2, 2)
    session = engine.store.get(result.hand_id)
    assert result.balance == 0
    assert set(session.deck) == set(create_deck())


@pytest.mark.parametrize(
    "bet, balance, code",
    [
        (0, 100, "INVALID_BET"),
        (6, 100, "INVALID_BET"),
        (True, 100, "INVALID_BET"),
        (5, 4, "INSUFFICIENT_BALANCE"),
        (1, -1, "INVALID_BALANCE"),
        (1, "100", "INVALID_BALANCE"),
    ],
)
def test_deal_rejects_bad_input_without_creating_session(bet, balance, code):
    engine = create_engine()
    with pytest.raises(ValidationError) as excinfo:
        engine.deal(bet, balance)
    assert excinfo.value.code == code
    assert engine.active_sessions() == 0


def test_draw_holding_made_royal_pays_max_bet_bonus():
    engine = create_engine()
    stage_hand(engine, "AS", "KS", "QS", "JS", "10S")

    result = engine.draw("hand-1", HOLD_ALL, 0)

    assert result.evaluation.rank == HandRank.ROYAL_FLUSH
    assert result.evaluation.multiplier == 800
    assert result.evaluation.payout == 4000
    assert result.evaluation.winning_indices == [0, 1, 2, 3, 4]
    assert result.balance == 4000
    assert engine.store.get("hand-1").cursor == 5


def test_draw_replaces_discards_in_deck_order():
    engine = create_engine()
    stage_hand(engine, "QH", "2C", "QD", "7S", "9H", "QS", "3D")

    result = engine.draw("hand-1", [True, False, True, False, True], 10)

    assert result.hand == tuple(cards("QH", "QS", "QD", "3D", "9H"))
    assert result.evaluation.rank == HandRank.THREE_OF_A_KIND
    assert result.evaluation.winning_indices == [0, 1, 2]
    assert result.balance == 10 + 15
    assert engine.store.get("hand-1").cursor == 7


def test_draw_reveals_seed_and_nonce():
    engine = create_engine()
    dealt = engine.deal(3, 30)
    result = engine.draw(dealt.hand_id, DISCARD_ALL, dealt.balance)

    assert commit(result.seed, result.nonce) == dealt.seed_commitment
    deck = seeded_shuffle(create_deck(), combine(result.seed, result.nonce))
    assert tuple(deck[:5]) == dealt.hand
    assert result.hand == tuple(deck[5:10])


def test_second_draw_is_rejected_and_state_unchanged():
    engine = create_engine()
    stage_hand(engine, "2H", "5C", "8D", "JS", "KC")
    engine.draw("hand-1", DISCARD_ALL, 0)
    after_first = engine.store.get("hand-1")

    with pytest.raises(SessionCompletedError, match="cannot replay"):
        engine.draw("hand-1", HOLD_ALL, 0)
    assert engine.store.get("hand-1") == after_first


def test_draw_unknown_hand():
    engine = create_engine()
    with pytest.raises(SessionNotFoundError, match="Session not found") as excinfo:
        engine.draw("missing", HOLD_ALL, 0)
    assert excinfo.value.status == 404


def test_draw_after_expiry_deletes_session():
    clock = FakeClock()
    engine = create_engine(clock=clock, session_ttl_seconds=3600)
    stage_hand(engine, "2H", "5C", "8D", "JS", "KC")
    clock.advance(3601)

    with pytest.raises(SessionExpiredError) as excinfo:
        engine.draw("hand-1", HOLD_ALL, 0)
    assert excinfo.value.status == 410
    assert engine.active_sessions() == 0


@pytest.mark.parametrize(
    "held, match",
    [
        ([True] * 4, "exactly 5 boolean"),
        ("TTTTT", "exactly 5 boolean"),
        ([1, 0, 1, 0, 1], "must be boolean"),
    ],
)
def test_draw_rejects_bad_hold_array(held, match):
    engine = create_engine()
    stage_hand(engine, "2H", "5C", "8D", "JS", "KC")
    with pytest.raises(ValidationError, match=match):
        engine.draw("hand-1", held, 0)
    assert not engine.store.get("hand-1").completed


@pytest.mark.parametrize("hand_id", ["", "   ", None, 42])
def test_draw_rejects_bad_hand_id(hand_id):
    engine = create_engine()
    with pytest.raises(ValidationError, match="Invalid hand ID"):
        engine.draw(hand_id, HOLD_ALL, 0)


def test_deck_exhaustion_leaves_session_untouched():
    engine = create_engine()
    staged = stage_hand(engine, "2H", "5C", "8D", "JS", "KC", cursor=50)

    with pytest.raises(DeckExhaustionError):
        engine.draw("hand-1", DISCARD_ALL, 0)
    assert engine.store.get("hand-1") == staged


def test_concurrent_draws_complete_exactly_once():
    engine = create_engine()
    stage_hand(engine, "2H", "5C", "8D", "JS", "KC")
    barrier = threading.Barrier(8)

    def attempt(_):
        barrier.wait()
        try:
            return engine.draw("hand-1", DISCARD_ALL, 0)
        except SessionCompletedError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(8)))

    winners = [outcome for outcome in outcomes if not isinstance(outcome, SessionCompletedError)]
    assert len(winners) == 1
    assert engine.store.get("hand-1").cursor == 10


def test_audit_completed_hand_releases_session():
    engine = create_engine()
    dealt = engine.deal(5, 5)
    drawn = engine.draw(dealt.hand_id, HOLD_ALL, 0)

    audit = engine.audit(drawn.seed, drawn.nonce, dealt.seed_commitment, hand_id=dealt.hand_id)

    assert audit.valid
    assert audit.deck[:5] == dealt.hand
    assert len(audit.deck) == 52
    assert engine.store.get(dealt.hand_id) is None


def test_audit_with_wrong_seed_keeps_session():
    engine = create_engine()
    stage_hand(engine, "2H", "5C", "8D", "JS", "KC")
    engine.draw("hand-1", HOLD_ALL, 0)

    audit = engine.audit("cd" * 32, STAGED_NONCE, commit(STAGED_SEED, STAGED_NONCE), hand_id="hand-1")

    assert not audit.valid
    assert engine.store.get("hand-1") is not None


def test_audit_requires_completed_hand():
    engine = create_engine()
    stage_hand(engine, "2H", "5C", "8D", "JS", "KC")
    with pytest.raises(ValidationError, match="must be completed") as excinfo:
        engine.audit(STAGED_SEED, STAGED_NONCE, commit(STAGED_SEED, STAGED_NONCE), hand_id="hand-1")
    assert excinfo.value.code == "HAND_NOT_COMPLETED"


def test_stateless_audit_replays_deck():
    engine = create_engine()
    commitment = commit(STAGED_SEED, STAGED_NONCE)

    audit = engine.audit(STAGED_SEED, STAGED_NONCE, commitment.upper())

    assert audit.valid
    assert list(audit.deck) == seeded_shuffle(create_deck(), combine(STAGED_SEED, STAGED_NONCE))
    assert audit.hand_id is None


@pytest.mark.parametrize(
    "seed, nonce, commitment, code",
    [
        ("", 1, "0" * 64, "INVALID_SEED"),
        ("ab", -1, "0" * 64, "INVALID_NONCE"),
        ("ab", True, "0" * 64, "INVALID_NONCE"),
        ("ab", 1, "xyz", "INVALID_COMMITMENT"),
        ("ab", 1, "é" * 64, "INVALID_COMMITMENT"),
    ],
)
def test_audit_validates_inputs(seed, nonce, commitment, code):
    engine = create_engine()
    with pytest.raises(ValidationError) as excinfo:
        engine.audit(seed, nonce, commitment)
    assert excinfo.value.code == code


def test_analyze_uses_configured_top():
    engine = create_engine(strategy_top=1)
    strategies = engine.analyze(cards("AS", "KS", "QS", "JS", "10S"))
    assert len(strategies) == 1
    assert strategies[0].hold_mask == 0b11111


def test_purge_expired_counts_removed_sessions():
    clock = FakeClock()
    engine = create_engine(clock=clock, session_ttl_seconds=10)
    engine.deal(1, 10)
    engine.deal(1, 10)
    clock.advance(11)

    assert engine.purge_expired() == 2
    assert engine.active_sessions() == 0


def test_audit_rejects_unencodable_seed():
    engine = create_engine()
    with pytest.raises(ValidationError, match="UTF-8") as excinfo:
        engine.audit("\ud800", 1, "0" * 64)
    assert excinfo.value.code == "INVALID_SEED"
