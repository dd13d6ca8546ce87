"""
Read results for reporting paths.

Reporting accessors never raise to their callers. Each one produces a
ReadResult that carries either a value or the error that prevented it, and
the public accessor applies an explicit default via ``value_or``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def capture(cls, fn: Callable[[], T]) -> "ReadResult[T]":
        try:
            return cls(value=fn())
        except Exception as e:
            return cls(error=e)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def value_or(self, default: T) -> T:
        if self.error is not None:
            return default
        return self.value  # type: ignore[return-value]


def degrade(result: ReadResult[T], default: T, what: str) -> T:
    """Return the result's value, or log the failure and return ``default``."""
    if not result.ok:
        logger.warning(f"Could not read {what}, using default: {result.error}")
    return result.value_or(default)
