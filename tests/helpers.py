from __future__ import annotations

import json
from typing import Iterable, List, Optional

from showdown.cards import Card, parse_cards
from showdown.game import GameSession
from showdown.models import GameConfig, Phase


def hand(*labels: str) -> List[Card]:
    """Build a hand from labels such as ``"10♠"`` or ``"Ts"``."""
    return parse_cards(list(labels))


def dealt_session(
    player: Iterable[str],
    dealer: Iterable[str],
    *,
    tokens: int = 100,
    config: Optional[GameConfig] = None,
) -> GameSession:
    """Return a session whose current round holds the given hands."""
    session = GameSession(config)
    session.start_round(seed=1)
    session.player.hand = hand(*player)
    session.dealer.hand = hand(*dealer)
    session.tokens = tokens
    session.phase = Phase.DEALT
    return session


# Fake sockets so we can exercise async paths without opening real connections.
class DummyWebSocket:
    def __init__(self, incoming: Iterable[object] = ()) -> None:
        self.incoming = list(incoming)
        self.sent: list[str] = []

    async def send(self, message: str) -> None:
        self.sent.append(message)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for raw in self.incoming:
            yield raw if isinstance(raw, str) else json.dumps(raw)

    def messages(self) -> list[dict]:
        return [json.loads(raw) for raw in self.sent]

    def types(self) -> list[str]:
        return [msg["type"] for msg in self.messages()]
