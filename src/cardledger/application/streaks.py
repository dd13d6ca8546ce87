"""
Learning streak calculation and the streak service.

Streaks are counted in calendar days. The pure helpers take ``today``
explicitly; StreakService reads it from its injected clock.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta

from cardledger.application.reporting import ReadResult, degrade
from cardledger.application.store import SnapshotStore
from cardledger.application.utils.dates import to_day
from cardledger.domain.constants import STREAK_WINDOW_DAYS
from cardledger.domain.models import LearningStreak
from cardledger.domain.stats.models import StreakDay

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class StreakSummary:
    current: int
    longest: int


def _unique_days(study_dates: Iterable[date | datetime | str]) -> list[date]:
    return sorted({to_day(d) for d in study_dates})


def calculate_streak(
    study_dates: Iterable[date | datetime | str], today: date | None = None
) -> StreakSummary:
    """
    Compute the current and longest streak from a collection of study days.

    The current streak counts back from today, or from yesterday when today
    has no study yet. Duplicates and ordering of the input do not matter.
    """
    days = _unique_days(study_dates)
    if not days:
        return StreakSummary(current=0, longest=0)

    today = today or date.today()
    studied = set(days)

    current = 0
    if today in studied:
        cursor = today
    elif today - ONE_DAY in studied:
        cursor = today - ONE_DAY
    else:
        cursor = None
    while cursor is not None and cursor in studied:
        current += 1
        cursor -= ONE_DAY

    longest = run = 1
    for prev, day in zip(days, days[1:]):
        run = run + 1 if day - prev == ONE_DAY else 1
        longest = max(longest, run)

    return StreakSummary(current=current, longest=longest)


def apply_study_date(
    streak: LearningStreak, day: date | datetime | str, today: date | None = None
) -> LearningStreak:
    """
    Return a streak with ``day`` added to its study dates.

    The longest streak never decreases. Adding a day that is already
    present leaves the date set and the longest streak unchanged.
    """
    study_day = to_day(day)
    days = _unique_days([*streak.study_dates, study_day])
    summary = calculate_streak(days, today)
    return replace(
        streak,
        study_dates=days,
        current_streak=summary.current,
        longest_streak=max(streak.longest_streak, summary.longest),
        last_study_date=study_day,
    )


class StreakWindow:
    """
    Calendar of the trailing ``days`` days ending today, oldest first.

    Iterating yields StreakDay entries and can be repeated.
    """

    def __init__(self, study_dates: Iterable[date | datetime | str], days: int, today: date):
        if days < 0:
            raise ValueError(f"days must be non-negative, got {days}")
        self.days = days
        self.today = today
        self._studied = frozenset(_unique_days(study_dates))

    def __len__(self) -> int:
        return self.days

    def __iter__(self) -> Iterator[StreakDay]:
        start = self.today - timedelta(days=self.days - 1)
        for offset in range(self.days):
            day = start + timedelta(days=offset)
            yield StreakDay(date=day, studied=day in self._studied, is_today=day == self.today)

    def __repr__(self) -> str:
        return f"StreakWindow(days={self.days}, today={self.today.isoformat()})"


class StreakService:
    """
    Streak accessors and updates over the snapshot store.

    Accessors degrade to neutral defaults when the store cannot be read;
    ``update_streak`` is a mutating operation and propagates failures.
    """

    def __init__(self, store: SnapshotStore, clock: Callable[[], datetime] = datetime.now):
        self._store = store
        self._clock = clock

    def _today(self) -> date:
        return self._clock().date()

    def read_streak(self) -> ReadResult[LearningStreak]:
        return ReadResult.capture(lambda: self._store.load().learning_streak)

    def _streak_or_empty(self) -> LearningStreak:
        return degrade(self.read_streak(), LearningStreak(), "learning streak")

    def get_current_streak(self) -> int:
        streak = self._streak_or_empty()
        return calculate_streak(streak.study_dates, self._today()).current

    def get_longest_streak(self) -> int:
        return self._streak_or_empty().longest_streak

    def get_last_study_date(self) -> date | None:
        return self._streak_or_empty().last_study_date

    def get_study_dates(self) -> list[date]:
        return list(self._streak_or_empty().study_dates)

    def has_studied_today(self) -> bool:
        return self._today() in self._streak_or_empty().study_dates

    def is_streak_active(self) -> bool:
        today = self._today()
        dates = self._streak_or_empty().study_dates
        return today in dates or today - ONE_DAY in dates

    def get_visualization(self, days: int = STREAK_WINDOW_DAYS) -> StreakWindow:
        return StreakWindow(self._streak_or_empty().study_dates, days, self._today())

    def update_streak(self, day: date | datetime | str | None = None) -> LearningStreak:
        """Record a study day (default today), persist, and return the new streak."""
        snapshot = self._store.load()
        today = self._today()
        snapshot.learning_streak = apply_study_date(
            snapshot.learning_streak, day if day is not None else today, today
        )
        self._store.save(snapshot)
        logger.info(
            f"Streak updated: current={snapshot.learning_streak.current_streak}, "
            f"longest={snapshot.learning_streak.longest_streak}"
        )
        return snapshot.learning_streak
