from datetime import datetime, timedelta

import pytest

from cardledger.application.config import AppConfig
from cardledger.application.factory import build_services
from cardledger.application.store import SnapshotStore
from cardledger.domain.models import Card, SessionType, StudySessionRecord
from cardledger.infrastructure.adapters.memory_repository import MemorySnapshotRepository

NOW = datetime(2024, 3, 15, 10, 0, 0)


class FakeClock:
    """Controllable clock; call it to read, ``advance`` to move forward."""

    def __init__(self, start: datetime = NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_card():
    """Factory for cards with sensible defaults."""

    def _make(card_id: str = "c1", **overrides) -> Card:
        fields = {
            "id": card_id,
            "front": f"Question {card_id}",
            "back": f"Answer {card_id}",
            "next_review": NOW,
            "created_at": NOW - timedelta(days=30),
        }
        fields.update(overrides)
        return Card(**fields)

    return _make


@pytest.fixture
def make_session():
    def _make(session_id: str = "s1", start: datetime = NOW, **overrides) -> StudySessionRecord:
        fields = {
            "id": session_id,
            "start_time": start,
            "session_type": SessionType.DUE,
            "end_time": start + timedelta(minutes=5),
            "duration": 300_000,
        }
        fields.update(overrides)
        return StudySessionRecord(**fields)

    return _make


@pytest.fixture
def memory_repo():
    return MemorySnapshotRepository()


@pytest.fixture
def store(memory_repo):
    return SnapshotStore(memory_repo)


@pytest.fixture
def services(memory_repo, clock):
    """Fully wired services over an in-memory repository."""
    config = AppConfig(backend="memory", data_file="/tmp/cardledger-test.yaml")
    return build_services(config, clock=clock, repository=memory_repo)
