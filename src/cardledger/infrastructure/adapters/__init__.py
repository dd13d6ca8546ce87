# Snapshot storage adapters
from .memory_repository import MemorySnapshotRepository
from .yaml_repository import YamlSnapshotRepository

__all__ = ["MemorySnapshotRepository", "YamlSnapshotRepository"]
