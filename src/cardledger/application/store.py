"""
Snapshot store: the trusted gateway between storage adapters and the core.

Everything the core reads from storage passes the integrity validator first,
and everything it writes is validated again before it leaves.
"""

import logging

from cardledger.application.integrity import load_snapshot, validate
from cardledger.application.schemas import dump_snapshot
from cardledger.domain.errors import SnapshotValidationError
from cardledger.domain.integrity import DataIntegrityResult
from cardledger.domain.models import Snapshot
from cardledger.domain.ports import SnapshotRepository

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, repository: SnapshotRepository, validate_on_save: bool = True):
        self._repo = repository
        self.validate_on_save = validate_on_save

    def check(self) -> DataIntegrityResult:
        """Validate the stored snapshot without converting it."""
        return validate(self._repo.load())

    def load(self) -> Snapshot:
        """
        Load and validate the stored snapshot.

        Raises:
            StorageError: If the repository cannot be read.
            SnapshotValidationError: If the stored data has integrity errors.
        """
        return load_snapshot(self._repo.load())

    def save(self, snapshot: Snapshot) -> None:
        raw = dump_snapshot(snapshot)
        if self.validate_on_save:
            result = validate(raw)
            if not result.is_valid:
                raise SnapshotValidationError(result)
        self._repo.save(raw)
        logger.info(
            f"Saved snapshot: {len(snapshot.cards)} cards, "
            f"{len(snapshot.session_history)} sessions"
        )
