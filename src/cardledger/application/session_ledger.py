"""
Session ledger: owns every study session of the running process.

Sessions live in an arena keyed by ID with at most one active session at a
time. All transitions are serialised by a lock, so the ledger can be shared
between threads.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from cardledger.application.id_service import generate_session_id
from cardledger.application.scheduler import coerce_quality
from cardledger.domain.constants import PASSING_QUALITY
from cardledger.domain.errors import SessionClosedError, SessionNotFoundError
from cardledger.domain.models import (
    ReviewEvent,
    SessionResults,
    SessionType,
    StudySessionRecord,
)

logger = logging.getLogger(__name__)


class SessionLedger:
    """
    Tracks study sessions from creation to completion.

    Returned records are copies; the ledger is the only writer of its sessions.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = generate_session_id,
    ):
        self._clock = clock
        self._id_factory = id_factory
        self._sessions: dict[str, StudySessionRecord] = {}
        self._reviews: dict[str, list[ReviewEvent]] = {}
        self._current_id: str | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def create_session(self, session_type: SessionType | str) -> StudySessionRecord:
        """
        Open a new session and make it the current one.

        An already-active session is ended as quit-early first, keeping its
        running counters.
        """
        kind = SessionType(session_type)
        with self._lock:
            if self._current_id is not None:
                displaced = self._sessions[self._current_id]
                if displaced.is_active:
                    logger.warning(f"Ending session {displaced.id} early: new session started")
                    self._close(displaced, quit_early=True)

            session = StudySessionRecord(
                id=self._id_factory(),
                start_time=self._clock(),
                session_type=kind,
            )
            self._sessions[session.id] = session
            self._reviews[session.id] = []
            self._current_id = session.id
            logger.info(f"Started {kind.value} session {session.id}")
            return replace(session)

    def record_card_review(
        self, session_id: str, card_id: str, quality: int
    ) -> StudySessionRecord:
        """
        Count one graded card toward the session's running totals.

        Raises:
            SessionNotFoundError: If the session is unknown.
            SessionClosedError: If the session has already ended.
            InvalidReviewQualityError: If quality is outside 0..4.
        """
        grade = coerce_quality(quality)
        with self._lock:
            session = self._active(session_id)
            studied = session.cards_studied + 1
            session.average_difficulty = (
                session.average_difficulty * session.cards_studied + int(grade)
            ) / studied
            session.cards_studied = studied
            if grade >= PASSING_QUALITY:
                session.correct_answers += 1
            else:
                session.incorrect_answers += 1
            self._reviews[session_id].append(
                ReviewEvent(card_id=card_id, quality=grade, reviewed_at=self._clock())
            )
            return replace(session)

    def end_session(
        self,
        session_id: str,
        results: SessionResults | None = None,
        end_time: datetime | None = None,
    ) -> StudySessionRecord:
        """
        Close a session, stamping its end time and duration.

        When ``results`` is given its totals replace the running counters.
        ``end_time`` defaults to the clock.

        Raises:
            SessionNotFoundError: If the session is unknown.
            SessionClosedError: If the session has already ended.
        """
        with self._lock:
            session = self._active(session_id)
            self._finalise(session, results, end_time or self._clock())
            if self._current_id == session.id:
                self._current_id = None
            logger.info(
                f"Ended session {session.id}: {session.correct_answers}/"
                f"{session.cards_studied} correct in {session.duration} ms"
            )
            return replace(session)

    def preview_end(
        self, session_id: str, results: SessionResults | None = None
    ) -> StudySessionRecord:
        """
        The record ``end_session`` would produce now, without closing anything.

        Lets callers persist the ended session before committing the close;
        pass the preview's ``end_time`` to ``end_session`` to match it.

        Raises:
            SessionNotFoundError: If the session is unknown.
            SessionClosedError: If the session has already ended.
        """
        with self._lock:
            preview = replace(self._active(session_id))
            self._finalise(preview, results, self._clock())
            return preview

    def require_active(self, session_id: str) -> StudySessionRecord:
        """
        Raises:
            SessionNotFoundError: If the session is unknown.
            SessionClosedError: If the session has already ended.
        """
        with self._lock:
            return replace(self._active(session_id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current_session(self) -> StudySessionRecord | None:
        with self._lock:
            if self._current_id is None:
                return None
            return replace(self._sessions[self._current_id])

    def get_session(self, session_id: str) -> StudySessionRecord | None:
        with self._lock:
            session = self._sessions.get(session_id)
            return replace(session) if session else None

    def get_session_reviews(self, session_id: str) -> list[ReviewEvent]:
        with self._lock:
            if session_id not in self._reviews:
                raise SessionNotFoundError(session_id)
            return list(self._reviews[session_id])

    def all_sessions(self) -> list[StudySessionRecord]:
        with self._lock:
            return [replace(s) for s in self._sessions.values()]

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _active(self, session_id: str) -> StudySessionRecord:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if not session.is_active:
            raise SessionClosedError(session_id)
        return session

    def _close(self, session: StudySessionRecord, quit_early: bool) -> None:
        self._finalise(session, None, self._clock(), quit_early=quit_early)
        if self._current_id == session.id:
            self._current_id = None

    @staticmethod
    def _finalise(
        session: StudySessionRecord,
        results: SessionResults | None,
        end: datetime,
        quit_early: bool | None = None,
    ) -> None:
        if results is not None:
            session.cards_studied = results.total_cards
            session.correct_answers = results.correct_answers
            session.incorrect_answers = results.total_cards - results.correct_answers
            session.average_difficulty = results.average_difficulty
        if quit_early is None:
            quit_early = results.quit_early if results else False
        session.end_time = end
        session.duration = max(0, int((end - session.start_time).total_seconds() * 1000))
        session.quit_early = quit_early
