from unittest.mock import MagicMock

import pytest

from cardledger.application.store import SnapshotStore
from cardledger.domain.errors import SnapshotValidationError
from cardledger.domain.models import Snapshot
from cardledger.infrastructure.adapters.memory_repository import MemorySnapshotRepository


def test_load_empty_repository(store):
    assert store.load() == Snapshot.empty()


def test_save_writes_snake_case(store, memory_repo, make_card):
    store.save(Snapshot(cards=[make_card()]))
    raw = memory_repo.load()
    assert set(raw) == {"cards", "session_history", "learning_streak", "achievements"}
    assert raw["cards"][0]["next_review"] == "2024-03-15T10:00:00"


def test_load_rejects_invalid_data():
    store = SnapshotStore(MemorySnapshotRepository({"cards": [{"id": "c1"}]}))
    with pytest.raises(SnapshotValidationError):
        store.load()
    assert not store.check().is_valid


def test_save_refuses_invalid_snapshot(make_card):
    repo = MagicMock()
    store = SnapshotStore(repo)
    with pytest.raises(SnapshotValidationError):
        store.save(Snapshot(cards=[make_card("dup"), make_card("dup")]))
    repo.save.assert_not_called()


def test_validation_on_save_can_be_disabled(make_card):
    repo = MagicMock()
    SnapshotStore(repo, validate_on_save=False).save(
        Snapshot(cards=[make_card("dup"), make_card("dup")])
    )
    repo.save.assert_called_once()
