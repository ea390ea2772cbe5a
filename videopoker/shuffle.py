from __future__ import annotations

import secrets
from typing import List, Sequence, TypeVar

T = TypeVar("T")

# The folding and congruential constants below are part of the fairness
# contract: auditors replay the shuffle from the revealed key, so changing
# any of them breaks every published hand.
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MASK = 0x7FFFFFFF


def secure_shuffle(items: Sequence[T]) -> List[T]:
    """Fisher-Yates driven by the OS CSPRNG. Not reproducible."""
    deck = list(items)
    for i in range(len(deck) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def seeded_shuffle(items: Sequence[T], key: str) -> List[T]:
    """Fisher-Yates driven by an LCG seeded from ``key``. Same key, same order."""
    deck = list(items)
    state = fold_key(key)
    for i in range(len(deck) - 1, 0, -1):
        state = lcg_next(state)
        j = state % (i + 1)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def fold_key(key: str) -> int:
    acc = 0
    for unit in _utf16_units(key):
        acc = _int32((acc << 5) - acc + unit)
    return abs(acc)


def lcg_next(state: int) -> int:
    # Browser verifiers run this step in IEEE-754 doubles, so the product
    # is rounded to 53 bits before masking. float() reproduces that rounding.
    return int(float(state) * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MASK


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _utf16_units(text: str) -> List[int]:
    raw = text.encode("utf-16-le", errors="surrogatepass")
    return [int.from_bytes(raw[idx : idx + 2], "little") for idx in range(0, len(raw), 2)]
