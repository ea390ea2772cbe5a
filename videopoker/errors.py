from __future__ import annotations

from http import HTTPStatus
from typing import Dict, Optional

# Every engine failure carries a stable code for clients and an HTTP-like
# status so any transport can map it without knowing the engine.


class PokerError(Exception):
    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    default_code = "INTERNAL"

    def __init__(self, msg: str, code: Optional[str] = None) -> None:
        super().__init__(msg)
        self.msg = msg
        self.code = code or self.default_code

    def payload(self) -> Dict[str, object]:
        return {"code": self.code, "msg": self.msg}


class ValidationError(PokerError, ValueError):
    """Malformed bet, balance, hold array, or card code."""

    status = HTTPStatus.BAD_REQUEST
    default_code = "BAD_SCHEMA"


class InputSizeError(ValidationError):
    """A hand handed to the evaluator or strategy engine is not 5 cards."""

    default_code = "INVALID_HAND_SIZE"


class SessionError(PokerError):
    status = HTTPStatus.BAD_REQUEST
    default_code = "BAD_SESSION"

    def __init__(self, msg: str, hand_id: str, code: Optional[str] = None) -> None:
        super().__init__(msg, code)
        self.hand_id = hand_id


class SessionNotFoundError(SessionError):
    status = HTTPStatus.NOT_FOUND
    default_code = "HAND_NOT_FOUND"


class SessionExpiredError(SessionError):
    status = HTTPStatus.GONE
    default_code = "HAND_EXPIRED"


class SessionCompletedError(SessionError):
    status = HTTPStatus.CONFLICT
    default_code = "HAND_COMPLETED"


class DeckExhaustionError(PokerError, RuntimeError):
    """Cursor ran past the end of the deck. Unreachable with 5 + 47 cards."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_code = "INTERNAL"


class ForbiddenError(PokerError):
    status = HTTPStatus.FORBIDDEN
    default_code = "FORBIDDEN"
