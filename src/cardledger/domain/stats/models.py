"""
Domain models for study statistics.

Immutable result types produced by the statistics calculator.
"""

from dataclasses import dataclass
from datetime import date

from cardledger.domain.constants import DEFAULT_EASINESS


@dataclass(frozen=True)
class BasicStats:
    """
    Card counts as of a reference date.

    The four difficulty buckets always sum to ``total_cards``.
    """

    total_cards: int = 0
    due_today: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    young_cards: int = 0
    mature_cards: int = 0


@dataclass(frozen=True)
class ExtendedStats:
    """
    Aggregates over cards, session history and the learning streak.

    Attributes:
        total_reviews: Sum of card repetitions.
        average_easiness: Mean easiness rounded to 2 decimals (2.5 with no cards).
        total_study_time: Sum of session durations in milliseconds.
        accuracy_rate: Percentage of correct answers rounded to 1 decimal.
        streak_days: The stored current streak, as of the last study day.
            It is not reset by missed days; ``StreakService.get_current_streak``
            recomputes the live value.
        sessions_completed: Sessions that were not quit early.
        average_session_length: Mean duration (ms) of completed sessions.
    """

    total_reviews: int = 0
    average_easiness: float = DEFAULT_EASINESS
    total_study_time: int = 0
    accuracy_rate: float = 0.0
    streak_days: int = 0
    sessions_completed: int = 0
    average_session_length: int = 0


@dataclass(frozen=True)
class TagShare:
    tag: str
    count: int
    percentage: float


@dataclass(frozen=True)
class DailyProgress:
    date: date
    cards_studied: int
    accuracy: int  # whole percent


@dataclass(frozen=True)
class WeeklyProgress:
    label: str
    start: date
    end: date
    cards_studied: int
    accuracy: int
    session_count: int


@dataclass(frozen=True)
class StreakDay:
    date: date
    studied: bool
    is_today: bool
