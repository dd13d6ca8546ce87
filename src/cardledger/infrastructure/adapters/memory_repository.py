"""
Memory Snapshot Repository — keeps the raw snapshot in process memory.

Used for tests and throwaway sessions; nothing survives the process.
"""

import copy
from typing import Any

from cardledger.domain.ports import SnapshotRepository


class MemorySnapshotRepository(SnapshotRepository):
    def __init__(self, initial: dict[str, Any] | None = None):
        self._raw: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.saves = 0

    def load(self) -> dict[str, Any]:
        return copy.deepcopy(self._raw)

    def save(self, raw: dict[str, Any]) -> None:
        self._raw = copy.deepcopy(raw)
        self.saves += 1
