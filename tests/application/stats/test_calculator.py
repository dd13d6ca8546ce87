from datetime import date, datetime, timedelta

import pytest

from cardledger.application.classifier import DifficultyThresholds
from cardledger.application.stats.calculator import StatisticsCalculator
from cardledger.domain.models import CardDifficulty, LearningStreak
from cardledger.domain.stats.models import BasicStats, ExtendedStats

NOW = datetime(2024, 3, 15, 10, 0, 0)
TODAY = NOW.date()


@pytest.fixture
def calculator():
    return StatisticsCalculator()


class TestBasicStats:
    def test_empty(self, calculator):
        assert calculator.basic_stats([], NOW) == BasicStats()

    def test_counts_and_buckets(self, calculator, make_card):
        cards = [
            make_card("a", interval=1),
            make_card("b", interval=5, next_review=NOW + timedelta(days=5)),
            make_card("c", interval=20, next_review=NOW - timedelta(days=1)),
            make_card("d", interval=90, next_review=NOW + timedelta(days=90)),
        ]
        stats = calculator.basic_stats(cards, NOW)
        assert stats.total_cards == 4
        assert stats.due_today == 2
        assert (stats.new_cards, stats.learning_cards, stats.young_cards, stats.mature_cards) == (
            1,
            1,
            1,
            1,
        )
        assert (
            stats.new_cards + stats.learning_cards + stats.young_cards + stats.mature_cards
            == stats.total_cards
        )

    def test_thresholds_are_configurable(self, make_card):
        calc = StatisticsCalculator(DifficultyThresholds(new_max=3, learning_max=10, young_max=20))
        stats = calc.basic_stats([make_card(interval=3), make_card("b", interval=25)], NOW)
        assert stats.new_cards == 1
        assert stats.mature_cards == 1


class TestExtendedStats:
    def test_empty_defaults(self, calculator):
        assert calculator.extended_stats([], [], LearningStreak()) == ExtendedStats()

    def test_aggregates(self, calculator, make_card, make_session):
        cards = [
            make_card("a", easiness=2.5, repetitions=3),
            make_card("b", easiness=2.0, repetitions=4),
            make_card("c", easiness=2.36, repetitions=0),
        ]
        history = [
            make_session("s1", cards_studied=3, correct_answers=2, incorrect_answers=1),
            make_session(
                "s2", cards_studied=0, duration=60_000, quit_early=True,
            ),
        ]
        stats = calculator.extended_stats(cards, history, LearningStreak(current_streak=4))

        assert stats.total_reviews == 7
        assert stats.average_easiness == 2.29
        assert stats.total_study_time == 360_000
        assert stats.accuracy_rate == 66.7
        assert stats.streak_days == 4
        assert stats.sessions_completed == 1
        assert stats.average_session_length == 300_000


class TestTagDistribution:
    def test_percentages_of_tag_occurrences(self, calculator, make_card):
        cards = [
            make_card("a", tags=["x", "y"]),
            make_card("b", tags=["x"]),
            make_card("c", tags=["z"]),
            make_card("d"),
        ]
        shares = calculator.tag_distribution(cards)
        assert [s.tag for s in shares] == ["x", "y", "z"]
        assert shares[0].count == 2
        assert shares[0].percentage == pytest.approx(50.0)
        assert sum(s.percentage for s in shares) == pytest.approx(100.0)

    def test_no_tags(self, calculator, make_card):
        assert calculator.tag_distribution([make_card()]) == []


class TestProgressOverTime:
    def test_window_and_grouping(self, calculator, make_session):
        history = [
            make_session("old", start=NOW - timedelta(days=7), cards_studied=5, correct_answers=5),
            make_session("a", start=NOW - timedelta(days=2), cards_studied=4, correct_answers=3),
            make_session(
                "b", start=NOW - timedelta(days=2, hours=1), cards_studied=2, correct_answers=0
            ),
            make_session("c", start=NOW, cards_studied=3, correct_answers=2),
        ]
        entries = calculator.progress_over_time(history, TODAY, days=7)

        assert [e.date for e in entries] == [TODAY - timedelta(days=2), TODAY]
        assert entries[0].cards_studied == 6
        assert entries[0].accuracy == 50
        assert entries[1].accuracy == 67

    def test_zero_studied_day_has_zero_accuracy(self, calculator, make_session):
        entries = calculator.progress_over_time([make_session(start=NOW)], TODAY, days=1)
        assert entries[0].cards_studied == 0
        assert entries[0].accuracy == 0

    def test_non_positive_window(self, calculator, make_session):
        assert calculator.progress_over_time([make_session()], TODAY, days=0) == []


def test_weekly_progress(calculator, make_session):
    history = [
        make_session("w4", start=NOW, cards_studied=10, correct_answers=8),
        make_session("w3", start=NOW - timedelta(days=8), cards_studied=4, correct_answers=1),
        make_session(
            "quit", start=NOW - timedelta(days=1), cards_studied=5, correct_answers=5,
            quit_early=True,
        ),
    ]
    weeks = calculator.weekly_progress(history, TODAY)

    assert [w.label for w in weeks] == ["Week 1", "Week 2", "Week 3", "Week 4"]
    assert weeks[-1].end == TODAY
    assert weeks[-1].start == TODAY - timedelta(days=6)
    assert (weeks[-1].cards_studied, weeks[-1].accuracy, weeks[-1].session_count) == (10, 80, 1)
    assert (weeks[2].cards_studied, weeks[2].accuracy) == (4, 25)
    assert weeks[0].session_count == 0


def test_recent_sessions_newest_first(calculator, make_session):
    history = [make_session(f"s{i}", start=NOW - timedelta(days=i)) for i in range(15)]
    recent = calculator.recent_sessions(history)
    assert len(recent) == 10
    assert recent[0].id == "s0"


def test_difficulty_distribution(calculator, make_card):
    dist = calculator.difficulty_distribution([make_card(interval=100)])
    assert dist[CardDifficulty.MATURE] == 1
    assert date(2024, 3, 15) == TODAY
