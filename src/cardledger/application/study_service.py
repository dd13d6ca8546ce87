"""
Study Service — Application layer orchestrator for the study loop.

Cards are added, sessions started, reviews graded and sessions finished
here. Each step loads the validated snapshot, applies the pure core
functions and saves the result. Failures propagate to the caller.
"""

import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime

from cardledger.application import scheduler
from cardledger.application.achievements import (
    AchievementContext,
    evaluate_achievements,
    merge_defaults,
)
from cardledger.application.card_filters import CustomStudyFilters, select_session_cards
from cardledger.application.classifier import (
    DEFAULT_THRESHOLDS,
    DifficultyThresholds,
    get_due_cards,
    sort_by_priority,
)
from cardledger.application.id_service import generate_card_id
from cardledger.application.session_ledger import SessionLedger
from cardledger.application.store import SnapshotStore
from cardledger.application.streaks import apply_study_date
from cardledger.application.utils.text import normalize_tags
from cardledger.domain.constants import (
    MAX_BACK_LEN,
    MAX_FRONT_LEN,
    MAX_TAG_LEN,
    MAX_TAGS,
    SESSION_HISTORY_LIMIT,
)
from cardledger.domain.errors import CardNotFoundError, InvalidCardError
from cardledger.domain.models import (
    Achievement,
    Card,
    LearningStreak,
    SessionResults,
    SessionType,
    Snapshot,
    StudySessionRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionStart:
    session: StudySessionRecord
    cards: list[Card]


@dataclass(frozen=True)
class SessionOutcome:
    session: StudySessionRecord
    streak: LearningStreak
    unlocked: list[Achievement]


class StudyService:
    def __init__(
        self,
        store: SnapshotStore,
        ledger: SessionLedger,
        thresholds: DifficultyThresholds = DEFAULT_THRESHOLDS,
        history_limit: int = SESSION_HISTORY_LIMIT,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ):
        self._store = store
        self._ledger = ledger
        self._thresholds = thresholds
        self._history_limit = history_limit
        self._clock = clock
        self._rng = rng

    @property
    def ledger(self) -> SessionLedger:
        return self._ledger

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def add_card(self, front: str, back: str, tags: Iterable[str] = ()) -> Card:
        """
        Create a new card, due immediately.

        Raises:
            InvalidCardError: If the text is empty or too long, or tags exceed limits.
        """
        front, back = front.strip(), back.strip()
        if not front or not back:
            raise InvalidCardError("Card front and back must not be empty")
        if len(front) > MAX_FRONT_LEN:
            raise InvalidCardError(f"Card front exceeds {MAX_FRONT_LEN} characters")
        if len(back) > MAX_BACK_LEN:
            raise InvalidCardError(f"Card back exceeds {MAX_BACK_LEN} characters")

        clean_tags = normalize_tags(tags)
        if len(clean_tags) > MAX_TAGS:
            raise InvalidCardError(f"A card may carry at most {MAX_TAGS} tags")
        too_long = [t for t in clean_tags if len(t) > MAX_TAG_LEN]
        if too_long:
            raise InvalidCardError(f"Tags longer than {MAX_TAG_LEN} characters: {too_long}")

        now = self._clock()
        card = Card(
            id=generate_card_id(),
            front=front,
            back=back,
            tags=clean_tags,
            next_review=now,
            created_at=now,
        )

        snapshot = self._store.load()
        snapshot.cards.append(card)
        self._evaluate_achievements(snapshot, session=None)
        self._store.save(snapshot)
        logger.info(f"Added card {card.id}")
        return card

    def get_card(self, card_id: str) -> Card:
        card = self._store.load().find_card(card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return card

    def list_cards(self) -> list[Card]:
        return list(self._store.load().cards)

    def get_due_cards(self, reference: date | datetime | None = None) -> list[Card]:
        """Due cards ordered by study priority."""
        ref = reference or self._clock()
        due = get_due_cards(self._store.load().cards, ref)
        return sort_by_priority(due, ref, self._thresholds)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def start_session(
        self,
        session_type: SessionType | str,
        filters: CustomStudyFilters | None = None,
    ) -> SessionStart:
        """
        Open a session of the given type and pick its cards.

        An active session is finished first as quit-early, so its reviews
        still reach history, the streak and achievements.
        """
        kind = SessionType(session_type)
        current = self._ledger.get_current_session()
        if current is not None and current.is_active:
            logger.info(f"Finishing session {current.id} before starting a new one")
            self.finish_session(
                current.id,
                SessionResults(
                    total_cards=current.cards_studied,
                    correct_answers=current.correct_answers,
                    average_difficulty=current.average_difficulty,
                    quit_early=True,
                ),
            )

        cards = select_session_cards(
            kind,
            self._store.load().cards,
            self._clock(),
            filters,
            self._thresholds,
            self._rng,
        )
        session = self._ledger.create_session(kind)
        return SessionStart(session=session, cards=cards)

    def review_card(self, card_id: str, quality: int, session_id: str | None = None) -> Card:
        """
        Grade a card, reschedule it and count it toward a session.

        The review counts toward ``session_id`` or, if omitted, the current
        session when one is active. The session is only credited once the
        rescheduled card has been saved.

        Raises:
            InvalidReviewQualityError: If quality is outside 0..4.
            CardNotFoundError: If no card has ``card_id``.
            SessionNotFoundError: If the target session is unknown or ended.
        """
        grade = scheduler.coerce_quality(quality)
        if session_id is None:
            current = self._ledger.get_current_session()
            session_id = current.id if current else None
        if session_id is not None:
            self._ledger.require_active(session_id)

        snapshot = self._store.load()
        card = snapshot.find_card(card_id)
        if card is None:
            raise CardNotFoundError(card_id)

        updated = scheduler.review(card, grade, self._clock())
        snapshot.cards = [updated if c.id == card_id else c for c in snapshot.cards]
        self._store.save(snapshot)

        if session_id is not None:
            self._ledger.record_card_review(session_id, card_id, grade)
        return updated

    def finish_session(
        self, session_id: str, results: SessionResults | None = None
    ) -> SessionOutcome:
        """
        End a session and fold it into history, streak and achievements.

        History keeps only the newest ``history_limit`` sessions. The streak
        gains today only when the session studied at least one card. The
        session stays open in the ledger until the snapshot is saved, so a
        failed finish can be retried.
        """
        session = self._ledger.preview_end(session_id, results)
        snapshot = self._store.load()

        if all(s.id != session.id for s in snapshot.session_history):
            snapshot.session_history.append(session)
        if len(snapshot.session_history) > self._history_limit:
            snapshot.session_history = snapshot.session_history[-self._history_limit :]

        if session.cards_studied > 0:
            today = self._clock().date()
            snapshot.learning_streak = apply_study_date(snapshot.learning_streak, today, today)

        unlocked = self._evaluate_achievements(snapshot, session=session)
        self._store.save(snapshot)
        self._ledger.end_session(session_id, results, end_time=session.end_time)
        return SessionOutcome(
            session=session, streak=snapshot.learning_streak, unlocked=unlocked
        )

    def _evaluate_achievements(
        self, snapshot: Snapshot, session: StudySessionRecord | None
    ) -> list[Achievement]:
        context = AchievementContext(
            cards=snapshot.cards,
            history=snapshot.session_history,
            streak=snapshot.learning_streak,
            session=session,
        )
        snapshot.achievements, unlocked = evaluate_achievements(
            merge_defaults(snapshot.achievements), context, self._clock()
        )
        return unlocked
