"""
Domain models for data-integrity reports.
"""

from dataclasses import dataclass, field
from enum import Enum


class IssueType(str, Enum):
    MISSING_FIELD = "missing_field"
    INVALID_TYPE = "invalid_type"
    INVALID_VALUE = "invalid_value"
    DUPLICATE_ID = "duplicate_id"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class DataIntegrityIssue:
    """
    One problem found in a persisted snapshot.

    ``entity`` names the record kind (card, session, learning_streak,
    achievement or snapshot) and ``index`` its position in its list, if any.
    ``loc`` is the raw location inside the record for schema-level issues.
    """

    type: IssueType
    field: str
    message: str
    severity: Severity
    entity: str = "snapshot"
    index: int | None = None
    loc: tuple[str | int, ...] = ()


@dataclass(frozen=True)
class DataIntegrityResult:
    issues: list[DataIntegrityIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[DataIntegrityIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[DataIntegrityIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors
