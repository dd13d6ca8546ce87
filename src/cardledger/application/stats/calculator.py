"""
Statistics calculator for deriving study insights from a snapshot.

This is a pure computation module with no I/O.
"""

from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime, timedelta

from cardledger.application.classifier import (
    DEFAULT_THRESHOLDS,
    DifficultyThresholds,
    difficulty_distribution,
    is_card_due,
)
from cardledger.application.utils.dates import round_half_up, to_day
from cardledger.domain.constants import (
    ACCURACY_DIGITS,
    DEFAULT_EASINESS,
    EASINESS_DIGITS,
    PROGRESS_WINDOW_DAYS,
    RECENT_SESSIONS,
    WEEKLY_PROGRESS_WEEKS,
)
from cardledger.domain.models import Card, CardDifficulty, LearningStreak, StudySessionRecord
from cardledger.domain.stats.models import (
    BasicStats,
    DailyProgress,
    ExtendedStats,
    TagShare,
    WeeklyProgress,
)


def _accuracy_percent(correct: int, studied: int) -> int:
    if studied <= 0:
        return 0
    return int(round_half_up(correct / studied * 100))


class StatisticsCalculator:
    """
    Computes study statistics from cards, session history and streak data.

    Stateless and side-effect free.
    """

    def __init__(self, thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds

    def basic_stats(self, cards: Sequence[Card], reference: date | datetime) -> BasicStats:
        """
        Count total and due cards plus the size of each difficulty bucket.
        """
        buckets = difficulty_distribution(cards, self.thresholds)
        return BasicStats(
            total_cards=len(cards),
            due_today=sum(1 for card in cards if is_card_due(card, reference)),
            new_cards=buckets[CardDifficulty.NEW],
            learning_cards=buckets[CardDifficulty.LEARNING],
            young_cards=buckets[CardDifficulty.YOUNG],
            mature_cards=buckets[CardDifficulty.MATURE],
        )

    def extended_stats(
        self,
        cards: Sequence[Card],
        history: Sequence[StudySessionRecord],
        streak: LearningStreak,
    ) -> ExtendedStats:
        """
        Aggregate review counts, easiness, study time and accuracy.

        Averages fall back to their neutral values when there is nothing to
        average: easiness 2.5 and accuracy 0.
        """
        total_reviews = sum(card.repetitions for card in cards)
        if cards:
            mean_easiness = sum(card.easiness for card in cards) / len(cards)
            average_easiness = round_half_up(mean_easiness, EASINESS_DIGITS)
        else:
            average_easiness = DEFAULT_EASINESS

        studied = sum(s.cards_studied for s in history)
        correct = sum(s.correct_answers for s in history)
        accuracy = round_half_up(correct / studied * 100, ACCURACY_DIGITS) if studied else 0.0

        completed = [s for s in history if not s.quit_early]
        average_length = (
            int(round_half_up(sum(s.duration for s in completed) / len(completed)))
            if completed
            else 0
        )

        return ExtendedStats(
            total_reviews=total_reviews,
            average_easiness=average_easiness,
            total_study_time=sum(s.duration for s in history),
            accuracy_rate=accuracy,
            streak_days=streak.current_streak,
            sessions_completed=len(completed),
            average_session_length=average_length,
        )

    def tag_distribution(self, cards: Sequence[Card]) -> list[TagShare]:
        """
        Share of each tag among all tag occurrences, most frequent first.

        Percentages are relative to the total number of tag occurrences, not
        the number of cards, so they sum to 100 when any tag exists.
        """
        counts = Counter(tag for card in cards for tag in card.tags)
        total = sum(counts.values())
        if not total:
            return []
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [
            TagShare(tag=tag, count=count, percentage=count / total * 100)
            for tag, count in ordered
        ]

    def progress_over_time(
        self,
        history: Sequence[StudySessionRecord],
        today: date,
        days: int = PROGRESS_WINDOW_DAYS,
    ) -> list[DailyProgress]:
        """
        Per-day totals for sessions started within the trailing ``days`` days.

        Days without sessions are omitted. Output is ordered oldest first.
        """
        if days <= 0:
            return []
        start = today - timedelta(days=days - 1)

        studied: Counter[date] = Counter()
        correct: Counter[date] = Counter()
        for session in history:
            day = to_day(session.start_time)
            if start <= day <= today:
                studied[day] += session.cards_studied
                correct[day] += session.correct_answers

        return [
            DailyProgress(
                date=day,
                cards_studied=studied[day],
                accuracy=_accuracy_percent(correct[day], studied[day]),
            )
            for day in sorted(studied)
        ]

    def weekly_progress(
        self,
        history: Sequence[StudySessionRecord],
        today: date,
        weeks: int = WEEKLY_PROGRESS_WEEKS,
    ) -> list[WeeklyProgress]:
        """
        Completed-session totals for trailing 7-day buckets, oldest first.

        "Week N" is always the bucket ending today.
        """
        completed = [s for s in history if not s.quit_early]
        result = []
        for index in range(weeks):
            end = today - timedelta(days=7 * (weeks - 1 - index))
            start = end - timedelta(days=6)
            in_week = [s for s in completed if start <= to_day(s.start_time) <= end]
            studied = sum(s.cards_studied for s in in_week)
            correct = sum(s.correct_answers for s in in_week)
            result.append(
                WeeklyProgress(
                    label=f"Week {index + 1}",
                    start=start,
                    end=end,
                    cards_studied=studied,
                    accuracy=_accuracy_percent(correct, studied),
                    session_count=len(in_week),
                )
            )
        return result

    def recent_sessions(
        self, history: Sequence[StudySessionRecord], limit: int = RECENT_SESSIONS
    ) -> list[StudySessionRecord]:
        """Most recently started sessions, newest first."""
        return sorted(history, key=lambda s: s.start_time, reverse=True)[:limit]

    def difficulty_distribution(self, cards: Sequence[Card]) -> dict[CardDifficulty, int]:
        return difficulty_distribution(cards, self.thresholds)
