"""Five-card showdown primitives reused by the host server and client."""

from .cards import CARD_BACK, Card, RANKS, SUITS, build_deck, deal, parse_cards, shuffle_deck
from .errors import EmptyDeckError, InvalidBetError, InvalidHandError, ShowdownError
from .evaluator import CATEGORY_NAMES, compare_evaluations, compare_hands, describe_category, evaluate_hand
from .game import GameSession, describe_outcome
from .models import Comparison, GameConfig, HandEvaluation, Outcome, Phase, Player, RoundOutcome

__all__ = [
    "CARD_BACK",
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "parse_cards",
    "shuffle_deck",
    "EmptyDeckError",
    "InvalidBetError",
    "InvalidHandError",
    "ShowdownError",
    "CATEGORY_NAMES",
    "compare_evaluations",
    "compare_hands",
    "describe_category",
    "evaluate_hand",
    "GameSession",
    "describe_outcome",
    "Comparison",
    "GameConfig",
    "HandEvaluation",
    "Outcome",
    "Phase",
    "Player",
    "RoundOutcome",
]
