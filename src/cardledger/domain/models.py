"""
Domain models for cards, study sessions, streaks and achievements.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum

from cardledger.domain.constants import DEFAULT_EASINESS, FIRST_INTERVAL, MAX_AVERAGE_DIFFICULTY


class ReviewQuality(IntEnum):
    """Self-graded recall quality, 0 (blackout) to 4 (perfect)."""

    BLACKOUT = 0
    WRONG = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class CardDifficulty(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    YOUNG = "young"
    MATURE = "mature"


class SessionType(str, Enum):
    DUE = "due"
    CUSTOM = "custom"
    NEW = "new"
    REVIEW = "review"
    ALL = "all"


class AchievementCategory(str, Enum):
    CARDS = "cards"
    SESSIONS = "sessions"
    STREAKS = "streaks"
    MASTERY = "mastery"


@dataclass
class Card:
    """
    A flashcard together with its SM-2 scheduling state.

    Attributes:
        easiness: Growth factor, kept within [1.3, 3.0].
        interval: Days until the next review, always >= 1.
        repetitions: Consecutive successful reviews.
        next_review: When the card is next due.
        last_review: Timestamp of the most recent review, if any.
    """

    id: str
    front: str
    back: str
    next_review: datetime
    created_at: datetime
    tags: list[str] = field(default_factory=list)
    easiness: float = DEFAULT_EASINESS
    interval: int = FIRST_INTERVAL
    repetitions: int = 0
    last_review: datetime | None = None


@dataclass
class ReviewEvent:
    """A single graded review recorded inside a session."""

    card_id: str
    quality: ReviewQuality
    reviewed_at: datetime


@dataclass
class StudySessionRecord:
    """
    One study session, active while ``end_time`` is None.

    ``duration`` is measured in milliseconds.
    """

    id: str
    start_time: datetime
    session_type: SessionType
    end_time: datetime | None = None
    cards_studied: int = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    average_difficulty: float = 0.0
    duration: int = 0
    quit_early: bool = False

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def accuracy(self) -> float:
        """Percentage of correct answers, 0 when nothing was studied."""
        if self.cards_studied <= 0:
            return 0.0
        return self.correct_answers / self.cards_studied * 100


@dataclass(frozen=True)
class SessionResults:
    """Final tallies supplied when a session is ended."""

    total_cards: int
    correct_answers: int
    average_difficulty: float
    quit_early: bool = False

    def __post_init__(self):
        if self.total_cards < 0 or self.correct_answers < 0:
            raise ValueError("Session results cannot be negative")
        if self.correct_answers > self.total_cards:
            raise ValueError(
                f"correct_answers ({self.correct_answers}) exceeds "
                f"total_cards ({self.total_cards})"
            )
        if not 0 <= self.average_difficulty <= MAX_AVERAGE_DIFFICULTY:
            raise ValueError(
                f"average_difficulty must be between 0 and {MAX_AVERAGE_DIFFICULTY}"
            )


@dataclass
class LearningStreak:
    current_streak: int = 0
    longest_streak: int = 0
    last_study_date: date | None = None
    study_dates: list[date] = field(default_factory=list)


@dataclass
class AchievementProgress:
    current: int
    required: int
    description: str = ""


@dataclass
class Achievement:
    """
    A milestone badge. Once ``unlocked_at`` is set it is never cleared.
    """

    id: str
    name: str
    description: str
    category: AchievementCategory
    progress: AchievementProgress
    icon: str = ""
    unlocked_at: datetime | None = None

    @property
    def unlocked(self) -> bool:
        return self.unlocked_at is not None


@dataclass
class Snapshot:
    """The full persisted study state handed between storage and the core."""

    cards: list[Card] = field(default_factory=list)
    session_history: list[StudySessionRecord] = field(default_factory=list)
    learning_streak: LearningStreak = field(default_factory=LearningStreak)
    achievements: list[Achievement] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()

    def find_card(self, card_id: str) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None
