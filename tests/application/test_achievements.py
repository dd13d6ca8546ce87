from datetime import datetime, timedelta

from cardledger.application.achievements import (
    AchievementContext,
    default_achievements,
    evaluate_achievements,
    merge_defaults,
)
from cardledger.domain.models import AchievementCategory, LearningStreak

NOW = datetime(2024, 3, 15, 10, 0, 0)


def _by_id(achievements):
    return {a.id: a for a in achievements}


def test_defaults_are_locked_and_cover_all_categories():
    defaults = default_achievements()
    assert len(defaults) == 8
    assert not any(a.unlocked for a in defaults)
    assert {a.category for a in defaults} == set(AchievementCategory)


def test_first_card_unlocks(make_card):
    context = AchievementContext(cards=[make_card()], history=[], streak=LearningStreak())
    updated, unlocked = evaluate_achievements(default_achievements(), context, NOW)

    assert [a.id for a in unlocked] == ["first_card"]
    by_id = _by_id(updated)
    assert by_id["first_card"].unlocked_at == NOW
    assert by_id["cards_10"].progress.current == 1
    assert not by_id["cards_10"].unlocked


def test_session_accuracy_and_streak(make_session):
    session = make_session(cards_studied=10, correct_answers=9, incorrect_answers=1)
    context = AchievementContext(
        cards=[],
        history=[session],
        streak=LearningStreak(current_streak=3),
        session=session,
    )
    _, unlocked = evaluate_achievements(default_achievements(), context, NOW)
    assert {a.id for a in unlocked} == {"first_session", "streak_3", "accuracy_90"}


def test_quit_early_sessions_do_not_count_toward_habit(make_session):
    history = [make_session(f"s{i}", quit_early=i % 2 == 0) for i in range(12)]
    context = AchievementContext(cards=[], history=history, streak=LearningStreak())
    updated, _ = evaluate_achievements(default_achievements(), context, NOW)
    assert _by_id(updated)["sessions_10"].progress.current == 6


def test_unlock_is_never_revoked(make_card):
    context = AchievementContext(cards=[make_card()], history=[], streak=LearningStreak())
    updated, _ = evaluate_achievements(default_achievements(), context, NOW)

    empty = AchievementContext(cards=[], history=[], streak=LearningStreak())
    later = NOW + timedelta(days=1)
    again, unlocked = evaluate_achievements(updated, empty, later)

    first_card = _by_id(again)["first_card"]
    assert first_card.unlocked_at == NOW
    assert first_card.progress.current == 1
    assert unlocked == []


def test_reviews_count_repetitions(make_card):
    cards = [make_card(str(i), repetitions=20) for i in range(5)]
    context = AchievementContext(cards=cards, history=[], streak=LearningStreak())
    _, unlocked = evaluate_achievements(default_achievements(), context, NOW)
    assert "reviews_100" in {a.id for a in unlocked}


def test_merge_defaults_keeps_stored_entries():
    stored = default_achievements()[:2]
    stored[0].unlocked_at = NOW
    merged = merge_defaults(stored)
    assert len(merged) == 8
    assert merged[0].unlocked_at == NOW
