import threading
from datetime import timedelta

import pytest

from cardledger.application.session_ledger import SessionLedger
from cardledger.domain.errors import (
    InvalidReviewQualityError,
    NotFoundError,
    SessionClosedError,
    SessionNotFoundError,
)
from cardledger.domain.models import SessionResults, SessionType


@pytest.fixture
def ledger(clock):
    counter = iter(range(1000))
    return SessionLedger(clock=clock, id_factory=lambda: f"session_{next(counter)}")


def test_create_makes_session_current(ledger, clock):
    session = ledger.create_session(SessionType.DUE)
    assert session.start_time == clock.now
    assert session.is_active
    assert ledger.get_current_session().id == session.id


def test_create_accepts_string_type(ledger):
    assert ledger.create_session("custom").session_type is SessionType.CUSTOM


def test_running_mean_and_counters(ledger):
    session = ledger.create_session(SessionType.DUE)
    for card_id, quality in (("a", 4), ("b", 2), ("c", 3)):
        ledger.record_card_review(session.id, card_id, quality)

    current = ledger.get_current_session()
    assert current.cards_studied == 3
    assert current.correct_answers == 2
    assert current.incorrect_answers == 1
    assert current.average_difficulty == pytest.approx(3.0)
    assert [e.card_id for e in ledger.get_session_reviews(session.id)] == ["a", "b", "c"]


def test_end_session_with_results(ledger, clock):
    session = ledger.create_session(SessionType.REVIEW)
    clock.advance(minutes=2)
    ended = ledger.end_session(session.id, SessionResults(10, 7, 2.8))

    assert ended.end_time == clock.now
    assert ended.duration == 120_000
    assert ended.cards_studied == 10
    assert ended.correct_answers == 7
    assert ended.incorrect_answers == 3
    assert ended.average_difficulty == 2.8
    assert not ended.quit_early
    assert ledger.get_current_session() is None


def test_end_session_without_results_keeps_counters(ledger):
    session = ledger.create_session(SessionType.DUE)
    ledger.record_card_review(session.id, "a", 4)
    ended = ledger.end_session(session.id)
    assert ended.cards_studied == 1
    assert ended.correct_answers == 1


def test_end_session_quit_early(ledger):
    session = ledger.create_session(SessionType.DUE)
    ended = ledger.end_session(session.id, SessionResults(0, 0, 0.0, quit_early=True))
    assert ended.quit_early


def test_unknown_session(ledger):
    with pytest.raises(SessionNotFoundError):
        ledger.record_card_review("nope", "a", 3)
    with pytest.raises(NotFoundError):
        ledger.end_session("nope")


def test_ended_session_rejects_transitions(ledger):
    session = ledger.create_session(SessionType.DUE)
    ledger.end_session(session.id)
    with pytest.raises(SessionClosedError):
        ledger.record_card_review(session.id, "a", 3)
    with pytest.raises(NotFoundError):
        ledger.end_session(session.id)


def test_invalid_quality_does_not_count(ledger):
    session = ledger.create_session(SessionType.DUE)
    with pytest.raises(InvalidReviewQualityError):
        ledger.record_card_review(session.id, "a", 7)
    assert ledger.get_current_session().cards_studied == 0


def test_new_session_displaces_active_one(ledger, clock):
    first = ledger.create_session(SessionType.DUE)
    ledger.record_card_review(first.id, "a", 4)
    clock.advance(seconds=30)
    second = ledger.create_session(SessionType.NEW)

    displaced = ledger.get_session(first.id)
    assert not displaced.is_active
    assert displaced.quit_early
    assert displaced.cards_studied == 1
    assert displaced.duration == 30_000
    assert ledger.get_current_session().id == second.id
    assert sum(s.is_active for s in ledger.all_sessions()) == 1


def test_returned_records_are_copies(ledger):
    session = ledger.create_session(SessionType.DUE)
    session.cards_studied = 99
    assert ledger.get_current_session().cards_studied == 0


@pytest.mark.parametrize(
    "total,correct,difficulty", [(-1, 0, 0.0), (3, 4, 1.0), (3, 1, -0.5), (2, 2, 9.0)]
)
def test_invalid_results_rejected(total, correct, difficulty):
    with pytest.raises(ValueError):
        SessionResults(total, correct, difficulty)


def test_concurrent_reviews_are_all_counted(clock):
    ledger = SessionLedger(clock=clock)
    session = ledger.create_session(SessionType.ALL)

    def worker():
        for _ in range(50):
            ledger.record_card_review(session.id, "card", 3)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    current = ledger.get_current_session()
    assert current.cards_studied == 400
    assert current.correct_answers == 400
    assert current.average_difficulty == pytest.approx(3.0)


def test_duration_never_negative(ledger, clock):
    session = ledger.create_session(SessionType.DUE)
    clock.now = clock.now - timedelta(minutes=1)
    assert ledger.end_session(session.id).duration == 0


def test_preview_end_does_not_close(ledger, clock):
    session = ledger.create_session(SessionType.DUE)
    ledger.record_card_review(session.id, "c1", 4)
    clock.advance(minutes=2)

    preview = ledger.preview_end(session.id, SessionResults(1, 1, 3.0, quit_early=True))
    assert preview.duration == 120_000
    assert preview.quit_early
    assert ledger.get_session(session.id).is_active
    assert ledger.get_current_session().id == session.id

    clock.advance(minutes=5)
    ended = ledger.end_session(session.id, SessionResults(1, 1, 3.0), end_time=preview.end_time)
    assert ended.end_time == preview.end_time
    assert ended.duration == 120_000
    assert ledger.get_current_session() is None


def test_require_active(ledger):
    session = ledger.create_session(SessionType.DUE)
    assert ledger.require_active(session.id).id == session.id
    ledger.end_session(session.id)
    with pytest.raises(SessionClosedError):
        ledger.require_active(session.id)
    with pytest.raises(SessionNotFoundError):
        ledger.require_active("nope")
