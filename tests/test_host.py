import asyncio
import logging
from http import HTTPStatus
from types import SimpleNamespace

from showdown.cards import CARD_BACK
from showdown.game import GameSession
from showdown.models import GameConfig, Phase
from showdown_host.server import ClientSession, HostServer, _process_request

from .helpers import DummyWebSocket, dealt_session

ROYAL = ["10♠", "J♠", "Q♠", "K♠", "A♠"]
HIGH_CARD = ["A♥", "J♦", "9♣", "6♠", "3♥"]


def run_connection(server: HostServer, incoming: list) -> DummyWebSocket:
    websocket = DummyWebSocket(incoming)
    asyncio.run(server.handle_connection(websocket))
    return websocket


def attach_session(server: HostServer, player: list, dealer: list, tokens: int = 100) -> tuple[ClientSession, DummyWebSocket]:
    websocket = DummyWebSocket()
    session = ClientSession(
        session_id=0,
        name="Tester",
        websocket=websocket,
        game=dealt_session(player, dealer, tokens=tokens, config=server.config),
    )
    server.sessions[0] = session
    return session, websocket


def test_hello_then_deal_sends_hidden_dealer_hand():
    server = HostServer()
    websocket = run_connection(server, [{"type": "hello", "name": "Ada"}, {"type": "deal"}])

    welcome, round_msg = websocket.messages()
    assert welcome["type"] == "welcome"
    assert welcome["name"] == "Ada"
    assert welcome["tokens"] == 100
    assert welcome["config"]["victory_threshold"] == 101
    assert round_msg["type"] == "round"
    assert round_msg["dealer_hand"] == [CARD_BACK] * 5
    assert len(round_msg["player_hand"]) == 5
    assert round_msg["v"] == 1


def test_session_removed_when_connection_ends():
    server = HostServer()
    run_connection(server, [{"type": "hello"}])
    assert server.sessions == {}
    assert server.session_counter == 1


def test_first_message_must_be_hello():
    server = HostServer()
    websocket = run_connection(server, [{"type": "deal"}, {"type": "hello"}])
    assert websocket.types() == ["error"]
    assert websocket.messages()[0]["code"] == "BAD_HELLO"


def test_bad_json_reported_and_connection_continues():
    server = HostServer()
    websocket = run_connection(server, ["not json", "[1, 2]", {"type": "hello"}])
    assert websocket.types() == ["error", "error", "welcome"]
    assert websocket.messages()[0]["code"] == "BAD_JSON"


def test_unknown_message_type_rejected():
    server = HostServer()
    websocket = run_connection(server, [{"type": "hello"}, {"type": "fold"}])
    assert websocket.messages()[-1]["code"] == "UNKNOWN_TYPE"


def test_reveal_before_deal_rejected():
    server = HostServer()
    websocket = run_connection(server, [{"type": "hello"}, {"type": "reveal", "bet": 10}])
    assert websocket.messages()[-1]["code"] == "ROUND_NOT_DEALT"


def test_full_round_over_the_wire():
    server = HostServer()
    websocket = run_connection(
        server,
        [{"type": "hello"}, {"type": "deal"}, {"type": "reveal", "bet": "10"}],
    )
    assert websocket.types()[:3] == ["welcome", "round", "result"]
    result = websocket.messages()[2]
    assert result["result"] in {"win", "lose", "tie"}
    assert result["bet"] == 10
    assert result["tokens_after"] in {90, 100, 110}
    assert len(result["dealer_hand"]) == 5
    assert CARD_BACK not in result["dealer_hand"]


def test_reveal_win_reports_message():
    server = HostServer()
    session, websocket = attach_session(server, ROYAL, HIGH_CARD, tokens=50)
    asyncio.run(server._handle_message(session, {"type": "reveal", "bet": 10}))

    result = websocket.messages()[-1]
    assert result["type"] == "result"
    assert result["result"] == "win"
    assert result["category_name"] == "Royal Flush"
    assert result["message"] == "You win with Royal Flush!"
    assert result["tokens_after"] == 60
    assert session.game.tokens == 60


def test_invalid_bet_leaves_round_open():
    server = HostServer()
    session, websocket = attach_session(server, ROYAL, HIGH_CARD, tokens=50)
    asyncio.run(server._handle_message(session, {"type": "reveal", "bet": 500}))

    error = websocket.messages()[-1]
    assert error["type"] == "error"
    assert error["code"] == "INVALID_BET"
    assert session.game.tokens == 50
    assert session.game.phase == Phase.DEALT

    asyncio.run(server._handle_message(session, {"type": "reveal", "bet": "ten"}))
    assert websocket.messages()[-1]["code"] == "INVALID_BET"


def test_bust_emits_session_over_and_blocks_deal():
    server = HostServer()
    session, websocket = attach_session(server, HIGH_CARD, ROYAL, tokens=10)
    asyncio.run(server._handle_message(session, {"type": "reveal", "bet": 10}))

    assert websocket.types()[-2:] == ["result", "session_over"]
    assert websocket.messages()[-1]["reason"] == "bust"

    asyncio.run(server._handle_message(session, {"type": "deal"}))
    assert websocket.messages()[-1]["code"] == "SESSION_OVER"


def test_victory_emits_session_over():
    server = HostServer()
    session, websocket = attach_session(server, ROYAL, HIGH_CARD, tokens=100)
    asyncio.run(server._handle_message(session, {"type": "reveal", "bet": 5}))
    assert websocket.messages()[-1] == {"v": 1, "type": "session_over", "reason": "victory", "tokens": 105}


def test_restart_replaces_game_session():
    server = HostServer(GameConfig(starting_tokens=30))
    session, websocket = attach_session(server, HIGH_CARD, ROYAL, tokens=10)
    old_game = session.game
    asyncio.run(server._handle_message(session, {"type": "restart"}))

    assert session.game is not old_game
    assert session.game.tokens == 30
    assert websocket.messages()[-1]["type"] == "welcome"
    assert websocket.messages()[-1]["tokens"] == 30


def test_connections_get_isolated_sessions():
    server = HostServer()

    async def scenario():
        first = DummyWebSocket([{"type": "hello", "name": "A"}, {"type": "deal"}])
        second = DummyWebSocket([{"type": "hello", "name": "B"}, {"type": "deal"}, {"type": "reveal", "bet": 100}])
        await asyncio.gather(server.handle_connection(first), server.handle_connection(second))
        return first, second

    first, second = asyncio.run(scenario())
    assert first.types() == ["welcome", "round"]
    assert second.types()[:3] == ["welcome", "round", "result"]
    assert first.messages()[0]["session_id"] != second.messages()[0]["session_id"]


def test_client_seed_is_ignored(monkeypatch):
    seeds: list = []
    original = GameSession.start_round

    def recording_start_round(self, seed=None):
        seeds.append(seed)
        return original(self, seed)

    monkeypatch.setattr(GameSession, "start_round", recording_start_round)
    server = HostServer(GameConfig(victory_threshold=10_000))
    incoming = [{"type": "hello"}]
    for _ in range(5):
        incoming += [{"type": "deal", "seed": 4}, {"type": "reveal", "bet": 1}]
    websocket = run_connection(server, incoming)

    assert websocket.types().count("round") == 5
    assert seeds == [None] * 5


def test_deal_during_open_round_is_rejected():
    server = HostServer()
    websocket = run_connection(server, [{"type": "hello"}, {"type": "deal"}, {"type": "deal"}])

    assert websocket.types() == ["welcome", "round", "error"]
    assert websocket.messages()[-1]["code"] == "ROUND_IN_PROGRESS"


def test_redeal_keeps_original_hand():
    server = HostServer()
    session, websocket = attach_session(server, HIGH_CARD, ROYAL, tokens=50)
    asyncio.run(server._handle_message(session, {"type": "deal"}))

    assert websocket.messages()[-1]["code"] == "ROUND_IN_PROGRESS"
    assert [card.label for card in session.game.player.hand] == HIGH_CARD
    assert session.game.phase == Phase.DEALT


def test_deal_allowed_after_reveal_and_restart():
    server = HostServer(GameConfig(victory_threshold=10_000))
    websocket = run_connection(
        server,
        [
            {"type": "hello"},
            {"type": "deal"},
            {"type": "restart"},
            {"type": "deal"},
            {"type": "reveal", "bet": 1},
            {"type": "deal"},
        ],
    )
    assert websocket.types() == ["welcome", "round", "welcome", "round", "result", "round"]


class CrashingWebSocket(DummyWebSocket):
    async def _iterate(self):
        yield '{"type": "hello", "name": "Crash"}'
        raise RuntimeError("socket exploded")


def test_unexpected_error_is_logged_and_session_cleaned_up(caplog):
    server = HostServer()
    websocket = CrashingWebSocket()
    with caplog.at_level(logging.ERROR, logger="showdown_host"):
        asyncio.run(server.handle_connection(websocket))

    assert websocket.types() == ["welcome"]
    assert server.sessions == {}
    records = [record for record in caplog.records if record.name == "showdown_host"]
    assert any("crashed" in record.getMessage() and record.exc_info for record in records)


class FakeConnection:
    def respond(self, status, text):
        return status, text


def make_request(path: str, upgrade: str = "") -> SimpleNamespace:
    headers = {"Upgrade": upgrade} if upgrade else {}
    return SimpleNamespace(path=path, headers=headers)


def test_process_request_health_paths_return_ok():
    for path in ("/", "/health", "/healthz"):
        assert _process_request(FakeConnection(), make_request(path)) == (HTTPStatus.OK, "host running\n")


def test_process_request_unknown_path_is_not_found():
    assert _process_request(FakeConnection(), make_request("/admin")) == (HTTPStatus.NOT_FOUND, "not found\n")


def test_process_request_lets_websocket_upgrade_through():
    assert _process_request(FakeConnection(), make_request("/", upgrade="WebSocket")) is None
