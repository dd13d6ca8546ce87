"""
Achievement definitions and progress evaluation.

Unlocks are monotonic: progress is only tracked while an achievement is
locked, and an ``unlocked_at`` stamp is never cleared.
"""

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from cardledger.domain.models import (
    Achievement,
    AchievementCategory,
    AchievementProgress,
    Card,
    LearningStreak,
    StudySessionRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementContext:
    """Everything an achievement metric may look at."""

    cards: Sequence[Card]
    history: Sequence[StudySessionRecord]
    streak: LearningStreak
    session: StudySessionRecord | None = None


def _completed_sessions(ctx: AchievementContext) -> int:
    return sum(1 for s in ctx.history if not s.quit_early)


def _total_reviews(ctx: AchievementContext) -> int:
    return sum(c.repetitions for c in ctx.cards)


def _session_accuracy(ctx: AchievementContext) -> int:
    if ctx.session is None:
        return 0
    return math.floor(ctx.session.accuracy)


_METRICS: dict[str, Callable[[AchievementContext], int]] = {
    "first_card": lambda ctx: len(ctx.cards),
    "cards_10": lambda ctx: len(ctx.cards),
    "first_session": lambda ctx: len(ctx.history),
    "sessions_10": _completed_sessions,
    "reviews_100": _total_reviews,
    "streak_3": lambda ctx: ctx.streak.current_streak,
    "streak_7": lambda ctx: ctx.streak.current_streak,
    "accuracy_90": _session_accuracy,
}


def _achievement(
    id: str,
    name: str,
    description: str,
    icon: str,
    category: AchievementCategory,
    required: int,
    progress: str,
) -> Achievement:
    return Achievement(
        id=id,
        name=name,
        description=description,
        icon=icon,
        category=category,
        progress=AchievementProgress(current=0, required=required, description=progress),
    )


def default_achievements() -> list[Achievement]:
    """A fresh copy of the built-in achievement set, all locked."""
    return [
        _achievement(
            "first_card", "Getting Started", "Create your first flashcard",
            "🎯", AchievementCategory.CARDS, 1, "Create 1 card",
        ),
        _achievement(
            "first_session", "First Steps", "Complete your first study session",
            "🚀", AchievementCategory.SESSIONS, 1, "Complete 1 session",
        ),
        _achievement(
            "streak_3", "Consistent Learner", "Study for 3 consecutive days",
            "🔥", AchievementCategory.STREAKS, 3, "Study 3 days in a row",
        ),
        _achievement(
            "streak_7", "Week Warrior", "Study for 7 consecutive days",
            "⚡", AchievementCategory.STREAKS, 7, "Study 7 days in a row",
        ),
        _achievement(
            "cards_10", "Card Collector", "Create 10 flashcards",
            "📚", AchievementCategory.CARDS, 10, "Create 10 cards",
        ),
        _achievement(
            "reviews_100", "Dedicated Student", "Complete 100 card reviews",
            "🎓", AchievementCategory.MASTERY, 100, "Review 100 cards",
        ),
        _achievement(
            "sessions_10", "Study Habit", "Complete 10 study sessions",
            "📖", AchievementCategory.SESSIONS, 10, "Complete 10 sessions",
        ),
        _achievement(
            "accuracy_90", "Sharp Mind", "Achieve 90% accuracy in a session",
            "🧠", AchievementCategory.MASTERY, 90, "Get 90% accuracy in a session",
        ),
    ]


def merge_defaults(achievements: Sequence[Achievement]) -> list[Achievement]:
    """Append any built-in achievements missing from a stored list, matched by ID."""
    known = {a.id for a in achievements}
    return [*achievements, *(a for a in default_achievements() if a.id not in known)]


def evaluate_achievements(
    achievements: Sequence[Achievement],
    context: AchievementContext,
    now: datetime,
) -> tuple[list[Achievement], list[Achievement]]:
    """
    Refresh progress for every locked achievement and unlock those that are complete.

    Returns:
        (updated achievements, achievements newly unlocked by this call)
    """
    updated: list[Achievement] = []
    unlocked: list[Achievement] = []

    for achievement in achievements:
        metric = _METRICS.get(achievement.id)
        if achievement.unlocked or metric is None:
            updated.append(achievement)
            continue

        current = metric(context)
        progress = replace(achievement.progress, current=current)
        refreshed = replace(achievement, progress=progress)
        if current >= progress.required:
            refreshed = replace(refreshed, unlocked_at=now)
            unlocked.append(refreshed)
            logger.info(f"Achievement unlocked: {refreshed.name} ({refreshed.id})")
        updated.append(refreshed)

    return updated, unlocked
