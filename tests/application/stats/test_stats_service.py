from unittest.mock import MagicMock

import pytest

from cardledger.application.stats.calculator import StatisticsCalculator
from cardledger.application.stats.service import StatisticsService
from cardledger.domain.errors import SnapshotValidationError, StorageError
from cardledger.domain.integrity import DataIntegrityResult
from cardledger.domain.models import Snapshot
from cardledger.domain.stats.models import BasicStats, ExtendedStats


@pytest.fixture
def failing_store():
    store = MagicMock()
    store.load.side_effect = StorageError("unreadable")
    return store


def test_service_orchestration(store, clock, make_card):
    store.save(Snapshot(cards=[make_card("a", tags=["x"]), make_card("b", interval=40)]))
    service = StatisticsService(store, clock=clock)

    basic = service.get_basic_stats()
    assert basic.total_cards == 2
    assert basic.due_today == 2
    assert basic.mature_cards == 1
    assert service.get_tag_distribution()[0].tag == "x"
    assert service.get_extended_stats().average_easiness == 2.5


def test_uses_injected_calculator(store, clock):
    calculator = MagicMock(spec=StatisticsCalculator)
    calculator.basic_stats.return_value = BasicStats(total_cards=42)
    service = StatisticsService(store, calculator=calculator, clock=clock)
    assert service.get_basic_stats().total_cards == 42
    calculator.basic_stats.assert_called_once()


def test_accessors_degrade_on_storage_failure(failing_store, clock, caplog):
    service = StatisticsService(failing_store, clock=clock)

    assert service.get_basic_stats() == BasicStats()
    assert service.get_extended_stats() == ExtendedStats()
    assert service.get_tag_distribution() == []
    assert service.get_progress_over_time(7) == []
    assert service.get_weekly_progress() == []
    assert "unreadable" in caplog.text


def test_read_variants_distinguish_failure_from_empty(failing_store, store, clock):
    failed = StatisticsService(failing_store, clock=clock).read_tag_distribution()
    empty = StatisticsService(store, clock=clock).read_tag_distribution()

    assert not failed.ok
    assert isinstance(failed.error, StorageError)
    assert empty.ok
    assert empty.value == []


def test_invalid_snapshot_degrades(clock):
    store = MagicMock()
    store.load.side_effect = SnapshotValidationError(DataIntegrityResult())
    service = StatisticsService(store, clock=clock)
    assert service.get_basic_stats() == BasicStats()
    with pytest.raises(SnapshotValidationError):
        service.read_basic_stats().unwrap()
