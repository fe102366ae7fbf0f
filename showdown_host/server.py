from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Optional

from websockets.asyncio.server import ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from showdown.errors import InvalidBetError
from showdown.game import GameSession, describe_outcome
from showdown.models import GameConfig

LOGGER = logging.getLogger("showdown_host")

PROTOCOL_VERSION = 1

# HostServer glues GameSession to WebSocket clients. Every network concern
# lives here; the session stays pure. Each connection owns its own session.


@dataclass
class ClientSession:
    session_id: int
    name: str
    websocket: Any
    game: GameSession


class HostServer:
    def __init__(self, config: Optional[GameConfig] = None) -> None:
        self.config = config or GameConfig()
        self.sessions: Dict[int, ClientSession] = {}
        self.session_counter = 0

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        async with serve(self.handle_connection, host, port, process_request=_process_request):
            LOGGER.info("Showdown host listening on %s:%s", host, port)
            await asyncio.Future()

    async def handle_connection(self, websocket: ServerConnection) -> None:
        session: Optional[ClientSession] = None
        try:
            async for raw in websocket:
                message = await self._decode(websocket, raw)
                if message is None:
                    continue
                if session is None:
                    session = await self._handle_hello(websocket, message)
                    if session is None:
                        return
                    continue
                await self._handle_message(session, message)
        except ConnectionClosed:
            LOGGER.info("Connection closed for %s", session.name if session else "unknown client")
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Connection handler crashed for %s: %s", session.name if session else "unknown client", exc)
        finally:
            if session is not None:
                self.sessions.pop(session.session_id, None)
                LOGGER.info("Session %s ended with %s tokens", session.session_id, session.game.tokens)

    async def _decode(self, websocket: Any, raw: Any) -> Optional[Dict[str, Any]]:
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            await _send_error(websocket, "BAD_JSON", "Message must be a JSON object")
            return None
        if not isinstance(message, dict):
            await _send_error(websocket, "BAD_JSON", "Message must be a JSON object")
            return None
        return message

    async def _handle_hello(self, websocket: Any, message: Dict[str, Any]) -> Optional[ClientSession]:
        if message.get("type") != "hello":
            await _send_error(websocket, "BAD_HELLO", "Expected hello")
            return None

        name_raw = message.get("name")
        name = name_raw.strip() if isinstance(name_raw, str) else ""
        session = ClientSession(
            session_id=self.session_counter,
            name=name or "Player",
            websocket=websocket,
            game=GameSession(self.config),
        )
        self.session_counter += 1
        self.sessions[session.session_id] = session
        LOGGER.info("Session %s opened for %s", session.session_id, session.name)
        await self._send_welcome(session)
        return session

    async def _handle_message(self, session: ClientSession, message: Dict[str, Any]) -> None:
        msg_type = message.get("type")
        if msg_type == "deal":
            await self._handle_deal(session)
        elif msg_type == "reveal":
            await self._handle_reveal(session, message)
        elif msg_type == "restart":
            session.game = GameSession(self.config)
            LOGGER.info("Session %s restarted", session.session_id)
            await self._send_welcome(session)
        else:
            await _send_error(session.websocket, "UNKNOWN_TYPE", f"Unsupported message type: {msg_type}")

    async def _handle_deal(self, session: ClientSession) -> None:
        # Shuffles always come from the session's own RNG; clients cannot seed them.
        if session.game.is_over:
            await _send_error(session.websocket, "SESSION_OVER", "Session is over; send restart")
            return
        try:
            payload = session.game.start_round()
        except RuntimeError as exc:
            await _send_error(session.websocket, "ROUND_IN_PROGRESS", str(exc))
            return
        await _send(session.websocket, "round", payload)

    async def _handle_reveal(self, session: ClientSession, message: Dict[str, Any]) -> None:
        bet = _coerce_bet(message.get("bet"))
        try:
            outcome = session.game.resolve_round(bet)
        except InvalidBetError as exc:
            await _send_error(session.websocket, exc.code, exc.msg)
            return
        except RuntimeError as exc:
            await _send_error(session.websocket, "ROUND_NOT_DEALT", str(exc))
            return

        await _send(
            session.websocket,
            "result",
            {**outcome.to_payload(), "message": describe_outcome(outcome)},
        )
        if outcome.victory or outcome.bust:
            reason = "victory" if outcome.victory else "bust"
            LOGGER.info("Session %s over: %s with %s tokens", session.session_id, reason, outcome.tokens_after)
            await _send(session.websocket, "session_over", {"reason": reason, "tokens": outcome.tokens_after})

    async def _send_welcome(self, session: ClientSession) -> None:
        await _send(
            session.websocket,
            "welcome",
            {
                "session_id": session.session_id,
                "name": session.name,
                "config": session.game.config_payload(),
                "tokens": session.game.tokens,
            },
        )


def _coerce_bet(raw: Any) -> Any:
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return raw
    return raw


async def _send(websocket: Any, msg_type: str, payload: Dict[str, Any]) -> None:
    await websocket.send(json.dumps({"v": PROTOCOL_VERSION, "type": msg_type, **payload}))


async def _send_error(websocket: Any, code: str, msg: str) -> None:
    await _send(websocket, "error", {"code": code, "msg": msg})


def _process_request(connection: ServerConnection, request: Request) -> Optional[Response]:
    """Return a simple HTTP response for health checks."""

    if request.headers.get("Upgrade", "").lower() == "websocket":
        return None  # let the WebSocket handshake continue

    if request.path in {"/", "/health", "/healthz"}:
        return connection.respond(HTTPStatus.OK, "host running\n")
    return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")
