"""
Ports (interfaces) for snapshot persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Any


class SnapshotRepository(ABC):
    """
    Port for loading and saving the raw study snapshot.

    Implementations:
        - MemorySnapshotRepository: Keeps the snapshot in process memory.
        - YamlSnapshotRepository: Stores the snapshot in a YAML file.
    """

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """
        Return the raw, unvalidated snapshot mapping.

        Raises:
            StorageError: If the underlying store cannot be read.
        """

    @abstractmethod
    def save(self, raw: dict[str, Any]) -> None:
        """
        Persist a raw snapshot mapping, replacing the previous one.

        Raises:
            StorageError: If the underlying store cannot be written.
        """
