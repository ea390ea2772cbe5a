from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Dict, Optional, Union

import websockets
from websockets.asyncio.server import ServerConnection, serve
from websockets.http11 import Request, Response

from videopoker.game import GameEngine
from videopoker.models import EngineConfig

from .protocol import ApiResult, RequestHandler

LOGGER = logging.getLogger("dealer")

HEALTH_PATHS = {"/", "/health", "/healthz"}

# Strategy enumerates millions of draws; it runs off the event loop.
THREADED_OPS = {"strategy"}

# DealerServer glues the video poker engine to WebSocket clients.
# Every network concern lives here; the GameEngine stays pure.


class DealerServer:
    def __init__(self, config: Optional[EngineConfig] = None, engine: Optional[GameEngine] = None) -> None:
        self.engine = engine or GameEngine(config)
        self.config = self.engine.config
        self.handler = RequestHandler(self.engine)
        self.reaper_task: Optional[asyncio.Task] = None

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        async with serve(self._handle_connection, host, port, process_request=_process_request):
            LOGGER.info("Dealer listening on %s:%s", host, port)
            self.reaper_task = asyncio.create_task(self._reap_forever())
            try:
                await asyncio.Future()
            finally:
                self.reaper_task.cancel()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        LOGGER.info("Client connected from %s", websocket.remote_address)
        try:
            async for raw in websocket:
                await self._send(websocket, await self._handle_message(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            LOGGER.info("Client %s disconnected", websocket.remote_address)

    async def _handle_message(self, raw: Union[str, bytes]) -> str:
        message = self._decode(raw)
        req_id = message.get("req_id")
        op = message.get("type")
        if not isinstance(op, str):
            LOGGER.warning("Dropping message without a type")
            result = ApiResult(HTTPStatus.BAD_REQUEST, {"code": "BAD_SCHEMA", "msg": "Message must be a JSON object with a type"})
            return self._envelope("error", result, req_id)

        if op in THREADED_OPS:
            result = await asyncio.to_thread(self.handler.handle, op, message)
        else:
            result = self.handler.handle(op, message)
        msg_type = f"{op}/result" if result.ok else "error"
        return self._envelope(msg_type, result, req_id)

    async def _reap_forever(self) -> None:
        interval = self.config.reap_interval_seconds
        while True:
            await asyncio.sleep(interval)
            try:
                self.engine.purge_expired()
            except Exception:  # noqa: BLE001
                LOGGER.exception("Session reaper failed")

    # Wire helpers ----------------------------------------------------

    async def _send(self, websocket: ServerConnection, message: str) -> None:
        try:
            await websocket.send(message)
        except websockets.ConnectionClosed:
            pass

    def _envelope(self, msg_type: str, result: ApiResult, req_id: object = None) -> str:
        body: Dict[str, object] = {
            "type": msg_type,
            "v": 1,
            "ts": datetime.now(timezone.utc).isoformat(),
            "status": int(result.status),
        }
        if req_id is not None:
            body["req_id"] = req_id
        body.update(result.body)
        return json.dumps(body)

    def _decode(self, raw: Union[str, bytes]) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return {}
        return message if isinstance(message, dict) else {}


def _process_request(connection: ServerConnection, request: Request) -> Optional[Response]:
    """Return a simple HTTP response for health checks."""

    if request.headers.get("Upgrade", "").lower() == "websocket":
        return None  # let the WebSocket handshake continue
    if request.path in HEALTH_PATHS:
        return connection.respond(HTTPStatus.OK, "dealer running\n")
    return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")
