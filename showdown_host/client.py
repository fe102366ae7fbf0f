from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import websockets
from websockets.asyncio.client import ClientConnection

LOGGER = logging.getLogger("showdown_client")

# ManualClient is the terminal table: it renders rounds and prompts for bets.
# All card ranking happens on the host.


@dataclass
class TableView:
    tokens: int = 0
    victory_threshold: int = 0
    round_id: Optional[str] = None
    player_hand: List[str] = field(default_factory=list)
    dealer_hand: List[str] = field(default_factory=list)
    status: str = ""


class ManualClient:
    def __init__(self, name: str, url: str, input_fn: Callable[[str], str] = input) -> None:
        self.name = name
        self.url = url
        self.input_fn = input_fn
        self.websocket: Optional[ClientConnection] = None
        self.view = TableView()
        self.finished = False

    async def run(self) -> None:
        async with websockets.connect(self.url) as ws:
            self.websocket = ws
            await self._send({"type": "hello", "name": self.name})
            while not self.finished:
                raw = await ws.recv()
                await self.handle_message(json.loads(raw))

    async def handle_message(self, msg: Dict[str, Any]) -> None:
        msg_type = msg.get("type")
        if msg_type == "welcome":
            self.view = TableView(
                tokens=msg.get("tokens", 0),
                victory_threshold=msg.get("config", {}).get("victory_threshold", 0),
            )
            print(f"\nWelcome {msg.get('name')}! You have {self.view.tokens} tokens.")
            await self._send({"type": "deal"})
        elif msg_type == "round":
            self.view.round_id = msg.get("round_id")
            self.view.player_hand = list(msg.get("player_hand", []))
            self.view.dealer_hand = list(msg.get("dealer_hand", []))
            self.view.tokens = msg.get("tokens", self.view.tokens)
            self.view.status = ""
            self._render()
            await self._prompt_bet()
        elif msg_type == "result":
            self.view.dealer_hand = list(msg.get("dealer_hand", []))
            self.view.tokens = msg.get("tokens_after", self.view.tokens)
            self.view.status = msg.get("message", "")
            self._render()
            if not (msg.get("victory") or msg.get("bust")):
                await self._prompt_next()
        elif msg_type == "session_over":
            if msg.get("reason") == "victory":
                print(f"Total victory! You finished with {msg.get('tokens')} tokens!")
            else:
                print("You're out of tokens.")
            await self._prompt_restart()
        elif msg_type == "error":
            print(f"Error {msg.get('code')}: {msg.get('msg')}")
            if msg.get("code") in {"INVALID_BET", "ROUND_IN_PROGRESS"}:
                await self._prompt_bet()
        else:
            LOGGER.warning("Ignoring unexpected message: %s", msg)

    def _render(self) -> None:
        print(f"\n=== Round {self.view.round_id} | Tokens: {self.view.tokens} ===")
        print(f"Dealer: {' '.join(self.view.dealer_hand)}")
        print(f"You:    {' '.join(self.view.player_hand)}")
        if self.view.status:
            print(self.view.status)

    async def _prompt_bet(self) -> None:
        while True:
            choice = self.input_fn(f"Bet [1-{self.view.tokens}] (h=help, r=restart, q=quit): ").strip().lower()
            if choice == "h":
                self._print_help()
                continue
            if choice == "q":
                self.finished = True
                return
            if choice == "r":
                await self._send({"type": "restart"})
                return
            try:
                bet = int(choice)
            except ValueError:
                print("Invalid bet.")
                continue
            if bet <= 0 or bet > self.view.tokens:
                print("Invalid bet.")
                continue
            await self._send({"type": "reveal", "bet": bet})
            return

    async def _prompt_next(self) -> None:
        choice = self.input_fn("Next hand? [Y/n/r=restart]: ").strip().lower()
        if choice == "n" or choice == "q":
            self.finished = True
        elif choice == "r":
            await self._send({"type": "restart"})
        else:
            await self._send({"type": "deal"})

    async def _prompt_restart(self) -> None:
        choice = self.input_fn("Play again? [Y/n]: ").strip().lower()
        if choice in {"n", "q"}:
            self.finished = True
        else:
            await self._send({"type": "restart"})

    def _print_help(self) -> None:
        print("Both hands get five cards. Bet, then the dealer's cards are revealed.")
        print("Higher poker hand wins the bet; a tie returns it.")
        print(f"Reach {self.view.victory_threshold} tokens to win the session; hit 0 and you're out.")

    async def _send(self, payload: Dict[str, Any]) -> None:
        assert self.websocket is not None
        await self.websocket.send(json.dumps({"v": 1, **payload}))


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Five-card showdown terminal client")
    parser.add_argument("--url", default="ws://127.0.0.1:8765")
    parser.add_argument("--name", default="Player")
    return parser.parse_args(argv)


def main(argv: list[str]) -> None:
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    client = ManualClient(name=args.name, url=args.url)
    try:
        asyncio.run(client.run())
    except KeyboardInterrupt:
        print("\nSession closed")


if __name__ == "__main__":
    main(sys.argv[1:])
