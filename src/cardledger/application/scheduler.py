"""
SM-2 review scheduler.

This is a pure computation module with no I/O: every function takes the
current time explicitly and returns a new Card instead of mutating its input.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta

from cardledger.application.utils.dates import round_interval
from cardledger.domain.constants import (
    FIRST_INTERVAL,
    MAX_EASINESS,
    MAX_QUALITY,
    MIN_EASINESS,
    PASSING_QUALITY,
    SECOND_INTERVAL,
)
from cardledger.domain.errors import InvalidReviewQualityError
from cardledger.domain.models import Card, ReviewQuality

logger = logging.getLogger(__name__)


def coerce_quality(quality: int) -> ReviewQuality:
    """Validate a raw grade, rejecting anything outside 0..4 (bools included)."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidReviewQualityError(quality)
    try:
        return ReviewQuality(quality)
    except ValueError:
        raise InvalidReviewQualityError(quality) from None


def next_easiness(easiness: float, quality: int) -> float:
    """
    Apply the SM-2 easiness adjustment on the 0-4 scale, clamped to [1.3, 3.0].

    EF' = EF + (0.1 - (4 - q) * (0.08 + (4 - q) * 0.02))
    """
    miss = MAX_QUALITY - quality
    adjusted = easiness + (0.1 - miss * (0.08 + miss * 0.02))
    return min(MAX_EASINESS, max(MIN_EASINESS, adjusted))


def review(card: Card, quality: int, now: datetime) -> Card:
    """
    Schedule a card after a graded review.

    A failed recall (quality < 3) resets the repetition count and brings the
    card back tomorrow. Successful recalls step through 1 day, 6 days, then
    grow geometrically by the updated easiness.

    Raises:
        InvalidReviewQualityError: If quality is not an integer in 0..4.
    """
    grade = coerce_quality(quality)
    easiness = next_easiness(card.easiness, grade)

    if grade < PASSING_QUALITY:
        repetitions = 0
        interval = FIRST_INTERVAL
    else:
        repetitions = card.repetitions + 1
        if repetitions == 1:
            interval = FIRST_INTERVAL
        elif repetitions == 2:
            interval = SECOND_INTERVAL
        else:
            interval = max(FIRST_INTERVAL, round_interval(card.interval * easiness))

    logger.debug(
        f"Reviewed {card.id} q={int(grade)}: interval {card.interval}->{interval}, "
        f"easiness {card.easiness:.2f}->{easiness:.2f}"
    )

    return replace(
        card,
        easiness=easiness,
        interval=interval,
        repetitions=repetitions,
        last_review=now,
        next_review=now + timedelta(days=interval),
    )


def predict_next_interval(card: Card, quality: int) -> int:
    """Interval (days) the card would get for ``quality``, without rescheduling it."""
    return review(card, quality, card.last_review or card.created_at).interval


def preview_intervals(card: Card) -> dict[ReviewQuality, int]:
    return {q: predict_next_interval(card, q) for q in ReviewQuality}
