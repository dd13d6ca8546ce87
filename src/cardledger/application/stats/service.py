"""
Statistics Service — Application layer orchestrator.

Coordinates loading the snapshot from the store and running the calculator.
Public accessors never raise: each has a ``read_*`` twin returning a
ReadResult, and the accessor degrades to an empty value with a warning.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime

from cardledger.application.reporting import ReadResult, degrade
from cardledger.application.store import SnapshotStore
from cardledger.domain.constants import PROGRESS_WINDOW_DAYS, WEEKLY_PROGRESS_WEEKS
from cardledger.domain.stats.models import (
    BasicStats,
    DailyProgress,
    ExtendedStats,
    TagShare,
    WeeklyProgress,
)

from .calculator import StatisticsCalculator

logger = logging.getLogger(__name__)


class StatisticsService:
    """
    Application service for study statistics.

    Depends on the SnapshotStore gateway, never on a concrete storage adapter.
    """

    def __init__(
        self,
        store: SnapshotStore,
        calculator: StatisticsCalculator | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Args:
            store: Validated snapshot gateway.
            calculator: Optional custom calculator; uses default if not provided.
            clock: Source of the current time.
        """
        self._store = store
        self._calc = calculator or StatisticsCalculator()
        self._clock = clock

    def _today(self) -> date:
        return self._clock().date()

    # ------------------------------------------------------------------
    # ReadResult variants
    # ------------------------------------------------------------------

    def read_basic_stats(self, reference: date | datetime | None = None) -> ReadResult[BasicStats]:
        ref = reference or self._today()
        return ReadResult.capture(lambda: self._calc.basic_stats(self._store.load().cards, ref))

    def read_extended_stats(self) -> ReadResult[ExtendedStats]:
        def compute() -> ExtendedStats:
            snapshot = self._store.load()
            return self._calc.extended_stats(
                snapshot.cards, snapshot.session_history, snapshot.learning_streak
            )

        return ReadResult.capture(compute)

    def read_tag_distribution(self) -> ReadResult[list[TagShare]]:
        return ReadResult.capture(lambda: self._calc.tag_distribution(self._store.load().cards))

    def read_progress_over_time(
        self, days: int = PROGRESS_WINDOW_DAYS
    ) -> ReadResult[list[DailyProgress]]:
        return ReadResult.capture(
            lambda: self._calc.progress_over_time(
                self._store.load().session_history, self._today(), days
            )
        )

    def read_weekly_progress(
        self, weeks: int = WEEKLY_PROGRESS_WEEKS
    ) -> ReadResult[list[WeeklyProgress]]:
        return ReadResult.capture(
            lambda: self._calc.weekly_progress(
                self._store.load().session_history, self._today(), weeks
            )
        )

    # ------------------------------------------------------------------
    # Degrading accessors
    # ------------------------------------------------------------------

    def get_basic_stats(self, reference: date | datetime | None = None) -> BasicStats:
        return degrade(self.read_basic_stats(reference), BasicStats(), "basic stats")

    def get_extended_stats(self) -> ExtendedStats:
        return degrade(self.read_extended_stats(), ExtendedStats(), "extended stats")

    def get_tag_distribution(self) -> list[TagShare]:
        return degrade(self.read_tag_distribution(), [], "tag distribution")

    def get_progress_over_time(self, days: int = PROGRESS_WINDOW_DAYS) -> list[DailyProgress]:
        return degrade(self.read_progress_over_time(days), [], "progress over time")

    def get_weekly_progress(self, weeks: int = WEEKLY_PROGRESS_WEEKS) -> list[WeeklyProgress]:
        return degrade(self.read_weekly_progress(weeks), [], "weekly progress")
