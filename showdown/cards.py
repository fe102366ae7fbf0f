from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional

from .errors import EmptyDeckError

SUITS = ("♠", "♥", "♦", "♣")
RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
FACE_VALUES = {"J": 11, "Q": 12, "K": 13, "A": 14}

CARD_BACK = "🂠"

# Input aliases so labels can be typed on a plain keyboard ("Ts", "Ah").
SUIT_ALIASES = {"s": "♠", "h": "♥", "d": "♦", "c": "♣"}
RANK_ALIASES = {"T": "10"}


@dataclass(frozen=True)
class Card:
    suit: str
    rank: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def numeric_rank(self) -> int:
        return FACE_VALUES.get(self.rank) or int(self.rank)

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    def __str__(self) -> str:
        return self.label


def build_deck() -> List[Card]:
    return [Card(suit, rank) for suit in SUITS for rank in RANKS]


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Shuffle ``deck`` in place with Fisher-Yates and return it."""
    (rng or random.Random()).shuffle(deck)
    return deck


def deal(deck: List[Card], count: int = 1) -> List[Card]:
    # The end of the list is the top of the deck.
    if len(deck) < count:
        raise EmptyDeckError("Not enough cards left in deck")
    return [deck.pop() for _ in range(count)]


def cards_to_labels(cards: List[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    text = label.strip()
    if len(text) < 2:
        raise ValueError(f"Invalid card label: {label}")
    rank, suit = text[:-1].upper(), text[-1]
    return Card(SUIT_ALIASES.get(suit.lower(), suit), RANK_ALIASES.get(rank, rank))


def parse_cards(labels: List[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
