"""Commit-reveal fairness for a single hand.

The server draws a secret seed and nonce, sends ``commit(seed, nonce)`` to
the client before any card is shown, shuffles with ``combine(seed, nonce)``
and only reveals seed and nonce once the hand is complete. The client can
then check the commitment and replay the shuffle, which shows the deck was
fixed before the hold decision was made.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time
from typing import Optional

SEED_BYTES = 32
NONCE_BYTES = 4


def generate_seed() -> str:
    return secrets.token_hex(SEED_BYTES)


def generate_nonce() -> int:
    return int.from_bytes(secrets.token_bytes(NONCE_BYTES), "big")


def combine(seed: str, nonce: int) -> str:
    return f"{seed}:{nonce}"


def commit(seed: str, nonce: int) -> str:
    return hashlib.sha256(combine(seed, nonce).encode("utf-8")).hexdigest()


def verify(seed: str, nonce: int, commitment: str) -> bool:
    if not isinstance(commitment, str) or not commitment.isascii():
        return False
    return hmac.compare_digest(commit(seed, nonce), commitment.lower())


def generate_hand_id(now: Optional[float] = None) -> str:
    if now is None:
        now = time.time()
    return f"{int(now * 1000)}-{secrets.token_hex(8)}"
