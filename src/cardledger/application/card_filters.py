"""Card selection for study sessions, including custom filtered study."""

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

from cardledger.application.classifier import (
    DEFAULT_THRESHOLDS,
    DifficultyThresholds,
    get_card_difficulty,
    is_card_due,
    recommended_session_size,
    sort_by_priority,
)
from cardledger.application.utils.text import card_matches_query, normalize_tags
from cardledger.domain.models import Card, CardDifficulty, SessionType


@dataclass(frozen=True)
class CustomStudyFilters:
    """
    Criteria for a custom study session. All given criteria must match.

    Attributes:
        query: Case-insensitive text matched against front, back and tags.
        tags: A card matches if it carries any of these tags.
        difficulty: Restrict to one difficulty bucket.
        include_due: When False, cards that are currently due are excluded.
        limit: Maximum number of cards returned.
        random_order: Shuffle the result after the limit is applied.
    """

    query: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    difficulty: CardDifficulty | None = None
    include_due: bool = True
    limit: int | None = None
    random_order: bool = False


def filter_cards(
    cards: Iterable[Card],
    filters: CustomStudyFilters,
    reference: date | datetime,
    thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS,
    rng: random.Random | None = None,
) -> list[Card]:
    wanted_tags = set(normalize_tags(filters.tags))
    selected: list[Card] = []

    for card in cards:
        if filters.query and not card_matches_query(card, filters.query):
            continue
        if wanted_tags and not wanted_tags.intersection(card.tags):
            continue
        if filters.difficulty and get_card_difficulty(card, thresholds) is not filters.difficulty:
            continue
        if not filters.include_due and is_card_due(card, reference):
            continue
        selected.append(card)

    if filters.limit is not None:
        selected = selected[: max(0, filters.limit)]
    if filters.random_order:
        (rng or random.Random()).shuffle(selected)
    return selected


def select_session_cards(
    session_type: SessionType,
    cards: Sequence[Card],
    reference: date | datetime,
    filters: CustomStudyFilters | None = None,
    thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS,
    rng: random.Random | None = None,
) -> list[Card]:
    """
    Pick the cards a session of the given type should present.

    Due sessions are trimmed to the recommended size, highest priority first.
    """
    if session_type is SessionType.DUE:
        due = [c for c in cards if is_card_due(c, reference)]
        return sort_by_priority(due, reference, thresholds)[: recommended_session_size(len(due))]
    if session_type is SessionType.NEW:
        return [c for c in cards if c.repetitions == 0]
    if session_type is SessionType.REVIEW:
        due = [c for c in cards if c.repetitions > 0 and is_card_due(c, reference)]
        return sort_by_priority(due, reference, thresholds)
    if session_type is SessionType.CUSTOM:
        return filter_cards(cards, filters or CustomStudyFilters(), reference, thresholds, rng)
    return list(cards)
