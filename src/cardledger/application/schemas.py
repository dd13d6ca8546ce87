"""
Persisted record schemas (Pydantic).

Every entity that crosses the storage boundary has a concrete record model.
Records accept snake_case keys as well as the camelCase keys written by older
data files, and always serialise as snake_case.

    Data flows: raw mapping -> Record -> domain dataclass -> Record -> raw mapping
"""

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cardledger.application.utils.text import normalize_tags
from cardledger.domain.constants import (
    DEFAULT_EASINESS,
    FIRST_INTERVAL,
    MAX_AVERAGE_DIFFICULTY,
    MAX_BACK_LEN,
    MAX_EASINESS,
    MAX_FRONT_LEN,
    MAX_ID_LEN,
    MAX_TAG_LEN,
    MAX_TAGS,
    MIN_EASINESS,
    MIN_INTERVAL,
)
from cardledger.domain.models import (
    Achievement,
    AchievementCategory,
    AchievementProgress,
    Card,
    LearningStreak,
    SessionType,
    Snapshot,
    StudySessionRecord,
)


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


LocalDateTime = Annotated[datetime, AfterValidator(_to_local_naive)]
Tag = Annotated[str, Field(max_length=MAX_TAG_LEN)]


class RecordBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class CardRecord(RecordBase):
    id: str = Field(min_length=1, max_length=MAX_ID_LEN)
    front: str = Field(min_length=1, max_length=MAX_FRONT_LEN)
    back: str = Field(min_length=1, max_length=MAX_BACK_LEN)
    tags: list[Tag] = Field(default_factory=list, max_length=MAX_TAGS)
    easiness: float = Field(default=DEFAULT_EASINESS, ge=MIN_EASINESS, le=MAX_EASINESS)
    interval: int = Field(default=FIRST_INTERVAL, ge=MIN_INTERVAL)
    repetitions: int = Field(default=0, ge=0)
    next_review: LocalDateTime
    last_review: LocalDateTime | None = None
    created_at: LocalDateTime

    @field_validator("tags", mode="after")
    @classmethod
    def normalize(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)

    @classmethod
    def from_domain(cls, card: Card) -> "CardRecord":
        return cls.model_construct(
            id=card.id,
            front=card.front,
            back=card.back,
            tags=list(card.tags),
            easiness=card.easiness,
            interval=card.interval,
            repetitions=card.repetitions,
            next_review=card.next_review,
            last_review=card.last_review,
            created_at=card.created_at,
        )

    def to_domain(self) -> Card:
        return Card(
            id=self.id,
            front=self.front,
            back=self.back,
            tags=list(self.tags),
            easiness=self.easiness,
            interval=self.interval,
            repetitions=self.repetitions,
            next_review=self.next_review,
            last_review=self.last_review,
            created_at=self.created_at,
        )


class SessionRecord(RecordBase):
    id: str = Field(min_length=1, max_length=MAX_ID_LEN)
    start_time: LocalDateTime
    session_type: SessionType
    end_time: LocalDateTime | None = None
    cards_studied: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    incorrect_answers: int = Field(default=0, ge=0)
    average_difficulty: float = Field(default=0.0, ge=0, le=MAX_AVERAGE_DIFFICULTY)
    duration: int = Field(default=0, ge=0)  # ms
    quit_early: bool = False

    @classmethod
    def from_domain(cls, session: StudySessionRecord) -> "SessionRecord":
        return cls.model_construct(
            id=session.id,
            start_time=session.start_time,
            session_type=session.session_type,
            end_time=session.end_time,
            cards_studied=session.cards_studied,
            correct_answers=session.correct_answers,
            incorrect_answers=session.incorrect_answers,
            average_difficulty=session.average_difficulty,
            duration=session.duration,
            quit_early=session.quit_early,
        )

    def to_domain(self) -> StudySessionRecord:
        return StudySessionRecord(
            id=self.id,
            start_time=self.start_time,
            session_type=self.session_type,
            end_time=self.end_time,
            cards_studied=self.cards_studied,
            correct_answers=self.correct_answers,
            incorrect_answers=self.incorrect_answers,
            average_difficulty=self.average_difficulty,
            duration=self.duration,
            quit_early=self.quit_early,
        )


class StreakRecord(RecordBase):
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_study_date: date | None = None
    study_dates: list[date] = Field(default_factory=list)

    @field_validator("study_dates", mode="after")
    @classmethod
    def sort_unique(cls, v: list[date]) -> list[date]:
        return sorted(set(v))

    @classmethod
    def from_domain(cls, streak: LearningStreak) -> "StreakRecord":
        return cls.model_construct(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            last_study_date=streak.last_study_date,
            study_dates=list(streak.study_dates),
        )

    def to_domain(self) -> LearningStreak:
        return LearningStreak(
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            last_study_date=self.last_study_date,
            study_dates=list(self.study_dates),
        )


class ProgressRecord(RecordBase):
    current: int = Field(default=0, ge=0)
    required: int = Field(default=1, ge=1)
    description: str = ""


class AchievementRecord(RecordBase):
    id: str = Field(min_length=1, max_length=MAX_ID_LEN)
    name: str = ""
    description: str = ""
    icon: str = ""
    category: AchievementCategory = AchievementCategory.CARDS
    progress: ProgressRecord = Field(default_factory=ProgressRecord)
    unlocked_at: LocalDateTime | None = None

    @classmethod
    def from_domain(cls, achievement: Achievement) -> "AchievementRecord":
        return cls.model_construct(
            id=achievement.id,
            name=achievement.name,
            description=achievement.description,
            icon=achievement.icon,
            category=achievement.category,
            progress=ProgressRecord.model_construct(
                current=achievement.progress.current,
                required=achievement.progress.required,
                description=achievement.progress.description,
            ),
            unlocked_at=achievement.unlocked_at,
        )

    def to_domain(self) -> Achievement:
        return Achievement(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            category=self.category,
            progress=AchievementProgress(
                current=self.progress.current,
                required=self.progress.required,
                description=self.progress.description,
            ),
            unlocked_at=self.unlocked_at,
        )


class SnapshotRecord(RecordBase):
    cards: list[CardRecord] = Field(default_factory=list)
    session_history: list[SessionRecord] = Field(default_factory=list)
    learning_streak: StreakRecord = Field(default_factory=StreakRecord)
    achievements: list[AchievementRecord] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, snapshot: Snapshot) -> "SnapshotRecord":
        return cls.model_construct(
            cards=[CardRecord.from_domain(c) for c in snapshot.cards],
            session_history=[SessionRecord.from_domain(s) for s in snapshot.session_history],
            learning_streak=StreakRecord.from_domain(snapshot.learning_streak),
            achievements=[AchievementRecord.from_domain(a) for a in snapshot.achievements],
        )


def dump_snapshot(snapshot: Snapshot) -> dict[str, Any]:
    """Serialise a snapshot to a JSON/YAML-safe mapping with snake_case keys."""
    return SnapshotRecord.from_domain(snapshot).model_dump(mode="json")
