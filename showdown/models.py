from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from .cards import Card, deal


class Outcome(str, Enum):
    WIN = "win"
    LOSE = "lose"
    TIE = "tie"


class Phase(str, Enum):
    IDLE = "IDLE"
    DEALT = "DEALT"
    RESOLVED = "RESOLVED"


@dataclass
class GameConfig:
    starting_tokens: int = 100
    victory_threshold: int = 101
    bust_threshold: int = 0


@dataclass
class Player:
    name: str
    hand: List[Card] = field(default_factory=list)

    def draw(self, deck: List[Card]) -> Card:
        card = deal(deck, 1)[0]
        self.hand.append(card)
        return card

    def reset(self) -> None:
        # Old cards are discarded, never returned to the deck.
        self.hand = []


@dataclass(frozen=True)
class HandEvaluation:
    category_rank: int
    tie_break: Tuple[int, ...]
    category_name: str


@dataclass(frozen=True)
class Comparison:
    outcome: Outcome
    category_name: str


@dataclass(frozen=True)
class RoundOutcome:
    result: Outcome
    category_name: str
    player_hand: List[str]
    dealer_hand: List[str]
    bet: int
    tokens_after: int
    victory: bool = False
    bust: bool = False

    def to_payload(self) -> Dict[str, object]:
        return {
            "result": self.result.value,
            "category_name": self.category_name,
            "player_hand": list(self.player_hand),
            "dealer_hand": list(self.dealer_hand),
            "bet": self.bet,
            "tokens_after": self.tokens_after,
            "victory": self.victory,
            "bust": self.bust,
        }
