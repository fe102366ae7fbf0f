from __future__ import annotations

from typing import Dict, List, Sequence

from .cards import Card
from .errors import InvalidHandError
from .models import Comparison, HandEvaluation, Outcome

HAND_SIZE = 5
ROYAL_RANKS = [10, 11, 12, 13, 14]

CATEGORY_NAMES: Dict[int, str] = {
    10: "Royal Flush",
    9: "Straight Flush",
    8: "Four of a Kind",
    7: "Full House",
    6: "Flush",
    5: "Straight",
    4: "Three of a Kind",
    3: "Two Pair",
    2: "One Pair",
    1: "High Card",
}


def describe_category(category_rank: int) -> str:
    try:
        return CATEGORY_NAMES[category_rank]
    except KeyError:
        raise ValueError(f"Unknown category rank: {category_rank}") from None


def evaluate_hand(cards: Sequence[Card]) -> HandEvaluation:
    """Rank exactly five cards. Higher ``category_rank`` is better.

    Grouped categories (pairs, trips, quads, full house) order the tie-break
    key by group size first and rank second, so the defining ranks are
    compared before the kickers.
    """
    if len(cards) != HAND_SIZE:
        raise InvalidHandError(f"Hand must have {HAND_SIZE} cards, got {len(cards)}")

    values = sorted((card.numeric_rank for card in cards), reverse=True)
    suits = [card.suit for card in cards]

    counts: Dict[int, int] = {}
    for value in values:
        counts.setdefault(value, 0)
        counts[value] += 1

    ordered_counts = sorted(counts.items(), key=lambda x: (x[1], x[0]), reverse=True)
    unique_values = [value for value, _ in ordered_counts]
    count_values = [count for _, count in ordered_counts]

    is_flush = len(set(suits)) == 1
    is_straight = _is_straight(values)

    if is_flush and is_straight and sorted(values) == ROYAL_RANKS:
        return _result(10, values)
    if is_flush and is_straight:
        return _result(9, values)
    if count_values[0] == 4:
        return _result(8, unique_values)
    if count_values == [3, 2]:
        return _result(7, unique_values)
    if is_flush:
        return _result(6, values)
    if is_straight:
        return _result(5, values)
    if count_values[0] == 3:
        return _result(4, unique_values)
    if count_values == [2, 2, 1]:
        return _result(3, unique_values)
    if count_values[0] == 2:
        return _result(2, unique_values)
    return _result(1, values)


def _is_straight(values: List[int]) -> bool:
    # Ace plays high only; A-2-3-4-5 is not a straight.
    if len(set(values)) != HAND_SIZE:
        return False
    ascending = sorted(values)
    return ascending == list(range(ascending[0], ascending[0] + HAND_SIZE))


def _result(category_rank: int, tie_break: List[int]) -> HandEvaluation:
    return HandEvaluation(
        category_rank=category_rank,
        tie_break=tuple(tie_break),
        category_name=describe_category(category_rank),
    )


def compare_evaluations(first: HandEvaluation, second: HandEvaluation) -> Comparison:
    if first.category_rank > second.category_rank:
        return Comparison(Outcome.WIN, first.category_name)
    if first.category_rank < second.category_rank:
        return Comparison(Outcome.LOSE, second.category_name)

    for mine, theirs in zip(first.tie_break, second.tie_break):
        if mine > theirs:
            return Comparison(Outcome.WIN, first.category_name)
        if mine < theirs:
            return Comparison(Outcome.LOSE, second.category_name)
    return Comparison(Outcome.TIE, first.category_name)


def compare_hands(hand_a: Sequence[Card], hand_b: Sequence[Card]) -> Comparison:
    """Compare two five-card hands from ``hand_a``'s point of view."""
    return compare_evaluations(evaluate_hand(hand_a), evaluate_hand(hand_b))
