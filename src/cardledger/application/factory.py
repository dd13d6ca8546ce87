"""
Service Factory
Centralizes the selection of the storage adapter and the wiring of services.
"""

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from cardledger.application.config import AppConfig
from cardledger.application.session_ledger import SessionLedger
from cardledger.application.stats.calculator import StatisticsCalculator
from cardledger.application.stats.service import StatisticsService
from cardledger.application.store import SnapshotStore
from cardledger.application.streaks import StreakService
from cardledger.application.study_service import StudyService
from cardledger.domain.ports import SnapshotRepository
from cardledger.infrastructure.adapters.memory_repository import MemorySnapshotRepository
from cardledger.infrastructure.adapters.yaml_repository import YamlSnapshotRepository


@dataclass
class Services:
    config: AppConfig
    store: SnapshotStore
    ledger: SessionLedger
    study: StudyService
    stats: StatisticsService
    streaks: StreakService


def get_snapshot_repository(config: AppConfig) -> SnapshotRepository:
    """
    Returns the SnapshotRepository implementation selected by config.
    """
    if config.backend == "memory":
        return MemorySnapshotRepository()
    return YamlSnapshotRepository(config.data_file)


def build_services(
    config: AppConfig,
    clock: Callable[[], datetime] = datetime.now,
    repository: SnapshotRepository | None = None,
    rng: random.Random | None = None,
) -> Services:
    """
    Wire every service around one store and one session ledger.
    """
    store = SnapshotStore(
        repository or get_snapshot_repository(config),
        validate_on_save=config.validate_on_save,
    )
    ledger = SessionLedger(clock=clock)
    thresholds = config.thresholds
    return Services(
        config=config,
        store=store,
        ledger=ledger,
        study=StudyService(
            store,
            ledger,
            thresholds=thresholds,
            history_limit=config.session_history_limit,
            clock=clock,
            rng=rng,
        ),
        stats=StatisticsService(store, StatisticsCalculator(thresholds), clock=clock),
        streaks=StreakService(store, clock=clock),
    )
