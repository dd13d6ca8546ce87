"""
Due-ness, difficulty buckets and study priority for cards.

Pure functions over Card values; all date comparisons are by calendar day.
"""

import math
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from cardledger.application.utils.dates import days_between, to_day
from cardledger.domain.constants import (
    DUE_TODAY_BONUS,
    LARGE_BACKLOG_RATIO,
    LARGE_SESSION_SIZE,
    LEARNING_CARD_BONUS,
    LEARNING_MAX_INTERVAL,
    MAX_SESSION_SIZE,
    MEDIUM_SESSION_SIZE,
    NEW_CARD_BONUS,
    NEW_MAX_INTERVAL,
    OVERDUE_DAY_WEIGHT,
    SMALL_SESSION_MAX,
    YOUNG_MAX_INTERVAL,
)
from cardledger.domain.models import Card, CardDifficulty


@dataclass(frozen=True)
class DifficultyThresholds:
    """
    Closed upper bounds (in days) for the interval-based difficulty buckets.

    An interval <= new_max is new, <= learning_max is learning,
    <= young_max is young, and anything longer is mature.
    """

    new_max: int = NEW_MAX_INTERVAL
    learning_max: int = LEARNING_MAX_INTERVAL
    young_max: int = YOUNG_MAX_INTERVAL

    def __post_init__(self):
        if not 0 < self.new_max < self.learning_max < self.young_max:
            raise ValueError(
                "Difficulty thresholds must be positive and strictly increasing, got "
                f"{self.new_max}/{self.learning_max}/{self.young_max}"
            )


DEFAULT_THRESHOLDS = DifficultyThresholds()


def is_card_due(card: Card, reference: date | datetime) -> bool:
    """True iff the card's next review falls on or before the reference day."""
    return to_day(card.next_review) <= to_day(reference)


def get_card_difficulty(
    card: Card, thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS
) -> CardDifficulty:
    if card.interval <= thresholds.new_max:
        return CardDifficulty.NEW
    if card.interval <= thresholds.learning_max:
        return CardDifficulty.LEARNING
    if card.interval <= thresholds.young_max:
        return CardDifficulty.YOUNG
    return CardDifficulty.MATURE


def difficulty_distribution(
    cards: Iterable[Card], thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS
) -> dict[CardDifficulty, int]:
    counts = Counter(get_card_difficulty(card, thresholds) for card in cards)
    return {level: counts.get(level, 0) for level in CardDifficulty}


def get_due_cards(cards: Iterable[Card], reference: date | datetime) -> list[Card]:
    return [card for card in cards if is_card_due(card, reference)]


def days_until_due(card: Card, reference: date | datetime) -> int:
    """Calendar days until the card is due; negative when overdue."""
    return days_between(reference, card.next_review)


def card_priority(
    card: Card,
    reference: date | datetime,
    thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS,
) -> int:
    """
    Study priority score; higher means study sooner.

    Overdue days dominate, with smaller bonuses for cards due today and for
    cards still in the new or learning buckets.
    """
    priority = 0
    days_left = days_until_due(card, reference)
    if days_left < 0:
        priority += -days_left * OVERDUE_DAY_WEIGHT
    elif days_left == 0:
        priority += DUE_TODAY_BONUS

    difficulty = get_card_difficulty(card, thresholds)
    if difficulty is CardDifficulty.NEW:
        priority += NEW_CARD_BONUS
    elif difficulty is CardDifficulty.LEARNING:
        priority += LEARNING_CARD_BONUS
    return priority


def sort_by_priority(
    cards: Iterable[Card],
    reference: date | datetime,
    thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS,
) -> list[Card]:
    # Stable: ties keep their input order
    return sorted(cards, key=lambda c: card_priority(c, reference, thresholds), reverse=True)


def recommended_session_size(due_count: int) -> int:
    if due_count <= SMALL_SESSION_MAX:
        return max(0, due_count)
    if due_count <= MEDIUM_SESSION_SIZE:
        return MEDIUM_SESSION_SIZE
    if due_count <= LARGE_SESSION_SIZE:
        return LARGE_SESSION_SIZE
    return min(MAX_SESSION_SIZE, math.ceil(due_count * LARGE_BACKLOG_RATIO))
