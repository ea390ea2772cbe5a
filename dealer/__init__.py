"""Dealer package: wraps the video poker engine with a WebSocket host."""

from .protocol import ApiResult, RequestHandler
from .server import DealerServer

__all__ = ["ApiResult", "DealerServer", "RequestHandler"]
