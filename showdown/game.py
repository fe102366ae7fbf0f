from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from .cards import CARD_BACK, Card, build_deck, cards_to_labels, shuffle_deck
from .errors import InvalidBetError
from .evaluator import HAND_SIZE, compare_hands
from .models import Comparison, GameConfig, Outcome, Phase, Player, RoundOutcome

LOGGER = logging.getLogger("showdown")

# GameSession keeps one player's table in memory. No networking lives here,
# only dealing, ranking, and token accounting.


class GameSession:
    """Player-versus-dealer five-card showdown with a running token balance."""

    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None) -> None:
        self.config = config or GameConfig()
        self.rng = random.Random(seed)
        self.deck: List[Card] = build_deck()
        self.player = Player("You")
        self.dealer = Player("Dealer")
        self.tokens = self.config.starting_tokens
        self.phase = Phase.IDLE
        self.round_counter = 0
        self.round_id: Optional[str] = None

    # Session status --------------------------------------------------

    @property
    def is_victory(self) -> bool:
        return self.tokens >= self.config.victory_threshold

    @property
    def is_bust(self) -> bool:
        return self.tokens <= self.config.bust_threshold

    @property
    def is_over(self) -> bool:
        return self.is_victory or self.is_bust

    # Round lifecycle -------------------------------------------------

    def start_round(self, seed: Optional[int] = None) -> Dict[str, object]:
        if self.is_over:
            raise RuntimeError("Session is over")
        if self.phase == Phase.DEALT:
            raise RuntimeError("Round in progress")

        rng = random.Random(seed) if seed is not None else self.rng
        self.deck = shuffle_deck(build_deck(), rng)
        self.player.reset()
        self.dealer.reset()

        for _ in range(HAND_SIZE):
            self.player.draw(self.deck)
            self.dealer.draw(self.deck)

        self.round_id = f"R-{self.round_counter:05d}"
        self.round_counter += 1
        self.phase = Phase.DEALT
        LOGGER.debug("Dealt %s: player=%s", self.round_id, cards_to_labels(self.player.hand))
        return self.start_round_payload()

    def resolve_round(self, bet: int) -> RoundOutcome:
        if self.phase != Phase.DEALT:
            raise RuntimeError("Round not dealt")
        self.validate_bet(bet)

        comparison = compare_hands(self.player.hand, self.dealer.hand)
        if comparison.outcome == Outcome.WIN:
            self.tokens += bet
        elif comparison.outcome == Outcome.LOSE:
            self.tokens = max(self.tokens - bet, 0)
        self.phase = Phase.RESOLVED

        LOGGER.debug(
            "Resolved %s: %s with %s, bet=%d tokens=%d",
            self.round_id,
            comparison.outcome.value,
            comparison.category_name,
            bet,
            self.tokens,
        )
        return RoundOutcome(
            result=comparison.outcome,
            category_name=comparison.category_name,
            player_hand=cards_to_labels(self.player.hand),
            dealer_hand=cards_to_labels(self.dealer.hand),
            bet=bet,
            tokens_after=self.tokens,
            victory=self.is_victory,
            bust=self.is_bust,
        )

    def validate_bet(self, bet: object) -> int:
        if isinstance(bet, bool) or not isinstance(bet, int):
            raise InvalidBetError("Bet must be a whole number of tokens")
        if bet <= 0:
            raise InvalidBetError("Bet must be positive")
        if bet > self.tokens:
            raise InvalidBetError(f"Bet exceeds available tokens ({self.tokens})")
        return bet

    # Payload helpers -------------------------------------------------

    def hidden_dealer_labels(self) -> List[str]:
        return [CARD_BACK for _ in self.dealer.hand]

    def start_round_payload(self) -> Dict[str, object]:
        if self.phase == Phase.IDLE:
            raise RuntimeError("Round not dealt")
        return {
            "round_id": self.round_id,
            "player_hand": cards_to_labels(self.player.hand),
            "dealer_hand": self.hidden_dealer_labels(),
            "dealer_hidden": True,
            "tokens": self.tokens,
        }

    def config_payload(self) -> Dict[str, object]:
        return {
            "starting_tokens": self.config.starting_tokens,
            "victory_threshold": self.config.victory_threshold,
            "bust_threshold": self.config.bust_threshold,
        }


def describe_outcome(outcome: Comparison | RoundOutcome) -> str:
    result = outcome.outcome if isinstance(outcome, Comparison) else outcome.result
    if result == Outcome.WIN:
        return f"You win with {outcome.category_name}!"
    if result == Outcome.LOSE:
        return f"Dealer wins with {outcome.category_name}!"
    return f"Tie with {outcome.category_name}!"
