"""
YAML Snapshot Repository — Infrastructure adapter for a local YAML file.

Implements SnapshotRepository by reading and atomically rewriting one file.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from cardledger.domain.errors import StorageError
from cardledger.domain.ports import SnapshotRepository

logger = logging.getLogger(__name__)


class YamlSnapshotRepository(SnapshotRepository):
    """
    Stores the snapshot as a YAML document.

    A missing file reads as an empty snapshot. Writes go to a temporary file
    in the same directory and are moved into place with ``os.replace``.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.info(f"No data file at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StorageError(
                f"Expected a mapping at the top of {self.path}, got {type(data).__name__}"
            )
        return data

    def save(self, raw: dict[str, Any]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(raw, f, sort_keys=False, allow_unicode=True)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug(f"Wrote snapshot to {self.path}")
