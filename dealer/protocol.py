from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Dict, List, Mapping

from videopoker.cards import HAND_SIZE, Card, cards_to_codes, parse_cards
from videopoker.errors import DeckExhaustionError, ForbiddenError, InputSizeError, PokerError, ValidationError
from videopoker.game import GameEngine
from videopoker.models import AuditResult, DealResult, DrawResult, Evaluation
from videopoker.paytable import hand_name, pay_table_rows
from videopoker.strategy import HoldStrategy

LOGGER = logging.getLogger("dealer")

INTERNAL_ERROR = {"code": "INTERNAL", "msg": "Internal server error"}

# Requests come in as decoded JSON objects and leave as ApiResults. Every
# engine failure is turned into a structured result here; nothing escapes
# to the transport.


@dataclass(frozen=True)
class ApiResult:
    status: HTTPStatus
    body: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status < HTTPStatus.BAD_REQUEST


class RequestHandler:
    def __init__(self, engine: GameEngine) -> None:
        self.engine = engine
        self._ops: Dict[str, Callable[[Mapping[str, Any]], Dict[str, Any]]] = {
            "deal": self._deal,
            "draw": self._draw,
            "strategy": self._strategy,
            "verify": self._verify,
            "paytable": self._paytable,
            "stats": self._stats,
        }

    @property
    def operations(self) -> List[str]:
        return list(self._ops)

    def handle(self, op: str, message: Mapping[str, Any]) -> ApiResult:
        handler = self._ops.get(op)
        if handler is None:
            return _error(ValidationError("Unsupported message type", "UNKNOWN_TYPE"))
        try:
            return ApiResult(HTTPStatus.OK, handler(message))
        except DeckExhaustionError:
            LOGGER.exception("Deck exhausted while handling %s", op)
            return ApiResult(HTTPStatus.INTERNAL_SERVER_ERROR, dict(INTERNAL_ERROR))
        except PokerError as exc:
            LOGGER.warning("Rejected %s request code=%s reason=%s", op, exc.code, exc.msg)
            return _error(exc)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Unhandled error while handling %s", op)
            return ApiResult(HTTPStatus.INTERNAL_SERVER_ERROR, dict(INTERNAL_ERROR))

    # Operations ------------------------------------------------------

    def _deal(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        result = self.engine.deal(message.get("bet"), message.get("balance"))
        return deal_payload(result)

    def _draw(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        result = self.engine.draw(message.get("handId"), message.get("held"), message.get("balance"))
        return draw_payload(result)

    def _strategy(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        hand = parse_hand(message.get("hand"))
        strategies = self.engine.analyze(hand, bet=message.get("bet"))
        return {"strategies": [strategy_payload(strategy) for strategy in strategies]}

    def _verify(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        result = self.engine.audit(
            message.get("seed"),
            message.get("nonce"),
            message.get("commitment"),
            hand_id=message.get("handId"),
        )
        return audit_payload(result)

    def _paytable(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        return {"rows": [{"hand": name, "payouts": payouts} for name, payouts in pay_table_rows()]}

    def _stats(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        if not self.engine.config.debug:
            raise ForbiddenError("Not available in production")
        return {"activeSessionCount": self.engine.active_sessions()}


def parse_hand(raw: Any) -> List[Card]:
    if not isinstance(raw, list):
        raise ValidationError(f"Hand must be an array of {HAND_SIZE} cards", "BAD_SCHEMA")
    if len(raw) != HAND_SIZE:
        raise InputSizeError(f"Hand must be an array of {HAND_SIZE} cards")
    return parse_cards(raw)


def _error(exc: PokerError) -> ApiResult:
    return ApiResult(exc.status, exc.payload())


# Payloads --------------------------------------------------------------


def evaluation_payload(evaluation: Evaluation) -> Dict[str, Any]:
    return {
        "rank": evaluation.rank.name,
        "name": hand_name(evaluation.rank),
        "multiplier": evaluation.multiplier,
        "payout": evaluation.payout,
        "winningIndices": list(evaluation.winning_indices),
    }


def deal_payload(result: DealResult) -> Dict[str, Any]:
    return {
        "handId": result.hand_id,
        "hand": cards_to_codes(result.hand),
        "balance": result.balance,
        "seedCommitment": result.seed_commitment,
    }


def draw_payload(result: DrawResult) -> Dict[str, Any]:
    return {
        "handId": result.hand_id,
        "hand": cards_to_codes(result.hand),
        "evaluation": evaluation_payload(result.evaluation),
        "balance": result.balance,
        "seed": result.seed,
        "nonce": result.nonce,
    }


def strategy_payload(strategy: HoldStrategy) -> Dict[str, Any]:
    return {
        "holdMask": strategy.hold_mask,
        "holdIndices": strategy.hold_indices,
        "holdCards": cards_to_codes(strategy.hold_cards),
        "ev": round(strategy.ev, 4),
        "evPercent": round(strategy.ev_percent, 2),
        "combinations": strategy.combinations,
        "mostLikelyOutcome": strategy.most_likely_outcome,
        "explanation": strategy.explanation,
    }


def audit_payload(result: AuditResult) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"valid": result.valid, "deck": cards_to_codes(result.deck)}
    if result.hand_id is not None:
        payload["handId"] = result.hand_id
    return payload


