import random

from videopoker.evaluator import HandRank, evaluate
from videopoker.paytable import payout

from .helpers import FakeClock, create_engine


def test_engine_handles_thousand_hands_with_consistent_balances():
    rng = random.Random(1234)
    clock = FakeClock()
    engine = create_engine(clock=clock)
    balance = 10_000

    for _ in range(1_000):
        bet = rng.randint(1, 5)
        dealt = engine.deal(bet, balance)
        balance = dealt.balance
        held = [rng.random() < 0.5 for _ in range(5)]
        drawn = engine.draw(dealt.hand_id, held, balance)

        for idx, keep in enumerate(held):
            if keep:
                assert drawn.hand[idx] == dealt.hand[idx]
        assert len(set(drawn.hand) | set(dealt.hand)) == 5 + held.count(False)
        rank = evaluate(drawn.hand)
        assert drawn.evaluation.rank == rank
        assert drawn.balance == balance + payout(rank, bet)
        balance = drawn.balance
        clock.advance(1)

    assert balance >= 0
    assert engine.active_sessions() == 1_000
    clock.advance(3600)
    assert engine.purge_expired() > 0


def test_hand_ids_are_unique():
    engine = create_engine()
    ids = {engine.deal(1, 1).hand_id for _ in range(500)}
    assert len(ids) == 500


def test_rank_frequencies_are_plausible():
    engine = create_engine()
    counts = {rank: 0 for rank in HandRank}
    for _ in range(2_000):
        counts[evaluate(engine.deal(1, 1).hand)] += 1
    # About 79% of dealt hands pay nothing (low pairs included); a dealt royal is ~1 in 650k.
    assert 1_450 < counts[HandRank.NOTHING] < 1_720
    assert counts[HandRank.ROYAL_FLUSH] <= 1
