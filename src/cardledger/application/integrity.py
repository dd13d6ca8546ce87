"""
Data integrity validation for persisted snapshots.

``validate`` inspects an untrusted raw mapping and reports every problem it
finds as a DataIntegrityIssue. ``load_snapshot`` turns a raw mapping into a
trusted Snapshot, refusing on errors and falling back to schema defaults for
fields that only carry warnings.
"""

import copy
import logging
from collections import Counter
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel, to_snake

from cardledger.application.schemas import (
    AchievementRecord,
    CardRecord,
    SessionRecord,
    StreakRecord,
)
from cardledger.domain.errors import SnapshotValidationError
from cardledger.domain.integrity import (
    DataIntegrityIssue,
    DataIntegrityResult,
    IssueType,
    Severity,
)
from cardledger.domain.models import Snapshot

logger = logging.getLogger(__name__)

# (snapshot key, entity name, record model, message label)
_RECORD_LISTS: tuple[tuple[str, str, type[BaseModel], str], ...] = (
    ("cards", "card", CardRecord, "Card"),
    ("session_history", "session", SessionRecord, "Session"),
    ("achievements", "achievement", AchievementRecord, "Achievement"),
)
_STREAK_KEY = "learning_streak"

# Fields whose problems make a record unusable. Everything else is a warning.
_ERROR_FIELDS: dict[str, frozenset[str]] = {
    "card": frozenset({"id", "front", "back", "next_review", "created_at"}),
    "session": frozenset({"id", "start_time", "session_type"}),
    "achievement": frozenset({"id"}),
    "learning_streak": frozenset(),
}

# Empty text in these fields counts as missing.
_BLANK_AS_MISSING = frozenset({"id", "front", "back"})

_VALUE_ERROR_TYPES = frozenset(
    {
        "greater_than",
        "greater_than_equal",
        "less_than",
        "less_than_equal",
        "string_too_short",
        "string_too_long",
        "too_short",
        "too_long",
        "enum",
        "literal_error",
        "finite_number",
        "value_error",
    }
)


def _lookup(raw: Mapping[str, Any], key: str) -> Any:
    if key in raw:
        return raw[key]
    return raw.get(to_camel(key))


def _field_path(loc: tuple[str | int, ...]) -> str:
    return ".".join(to_snake(step) if isinstance(step, str) else str(step) for step in loc)


def _classify(error_type: str, top_field: str) -> IssueType:
    if error_type == "missing":
        return IssueType.MISSING_FIELD
    if error_type == "string_too_short" and top_field in _BLANK_AS_MISSING:
        return IssueType.MISSING_FIELD
    if error_type in _VALUE_ERROR_TYPES:
        return IssueType.INVALID_VALUE
    return IssueType.INVALID_TYPE


def _describe(issue_type: IssueType, prefix: str, field: str, detail: str) -> str:
    if issue_type is IssueType.MISSING_FIELD:
        return f"{prefix}Missing required field '{field}'"
    if issue_type is IssueType.INVALID_TYPE:
        return f"{prefix}Invalid type for '{field}': {detail}"
    return f"{prefix}Invalid value for '{field}': {detail}"


def _record_issues(
    model: type[BaseModel],
    item: Any,
    entity: str,
    index: int | None,
    prefix: str,
) -> tuple[BaseModel | None, list[DataIntegrityIssue]]:
    """Validate one raw record, returning the parsed record (if clean) and its issues."""
    if not isinstance(item, Mapping):
        severity = Severity.WARNING if entity == "learning_streak" else Severity.ERROR
        issue = DataIntegrityIssue(
            type=IssueType.INVALID_TYPE,
            field=entity,
            message=f"{prefix}Record must be a mapping, got {type(item).__name__}",
            severity=severity,
            entity=entity,
            index=index,
        )
        return None, [issue]

    try:
        return model.model_validate(item), []
    except ValidationError as exc:
        issues = []
        for err in exc.errors():
            loc = tuple(err["loc"])
            top_field = to_snake(str(loc[0])) if loc else entity
            issue_type = _classify(err["type"], top_field)
            field = _field_path(loc) if loc else entity
            severity = (
                Severity.ERROR if top_field in _ERROR_FIELDS[entity] else Severity.WARNING
            )
            issues.append(
                DataIntegrityIssue(
                    type=issue_type,
                    field=field,
                    message=_describe(issue_type, prefix, field, err["msg"]),
                    severity=severity,
                    entity=entity,
                    index=index,
                    loc=loc,
                )
            )
        return None, issues


def _duplicate_ids(items: list[Any], entity: str, label: str) -> list[DataIntegrityIssue]:
    ids = [
        item.get("id").strip()
        for item in items
        if isinstance(item, Mapping) and isinstance(item.get("id"), str) and item.get("id").strip()
    ]
    issues = []
    for dup_id, count in Counter(ids).items():
        if count < 2:
            continue
        issues.append(
            DataIntegrityIssue(
                type=IssueType.DUPLICATE_ID,
                field="id",
                message=f"Duplicate {label.lower()} id '{dup_id}' appears {count} times",
                severity=Severity.ERROR,
                entity=entity,
            )
        )
    return issues


def _session_consistency(
    record: SessionRecord, index: int, prefix: str
) -> list[DataIntegrityIssue]:
    issues = []
    answered = record.correct_answers + record.incorrect_answers
    if record.cards_studied != answered:
        issues.append(
            DataIntegrityIssue(
                type=IssueType.INVALID_VALUE,
                field="cards_studied",
                message=(
                    f"{prefix}cards_studied ({record.cards_studied}) does not equal "
                    f"correct + incorrect answers ({answered})"
                ),
                severity=Severity.WARNING,
                entity="session",
                index=index,
            )
        )
    if record.end_time is not None and record.end_time < record.start_time:
        issues.append(
            DataIntegrityIssue(
                type=IssueType.INVALID_VALUE,
                field="end_time",
                message=f"{prefix}end_time is earlier than start_time",
                severity=Severity.WARNING,
                entity="session",
                index=index,
            )
        )
    return issues


def validate(raw: Any) -> DataIntegrityResult:
    """
    Inspect a raw snapshot and report every integrity issue found.

    Never raises; an unusable input is reported as an error-severity issue.
    """
    if not isinstance(raw, Mapping):
        return DataIntegrityResult(
            issues=[
                DataIntegrityIssue(
                    type=IssueType.INVALID_TYPE,
                    field="snapshot",
                    message=f"Snapshot must be a mapping, got {type(raw).__name__}",
                    severity=Severity.ERROR,
                )
            ]
        )

    issues: list[DataIntegrityIssue] = []

    for key, entity, model, label in _RECORD_LISTS:
        items = _lookup(raw, key)
        if items is None:
            continue
        if not isinstance(items, list):
            issues.append(
                DataIntegrityIssue(
                    type=IssueType.INVALID_TYPE,
                    field=key,
                    message=f"'{key}' must be a list, got {type(items).__name__}",
                    severity=Severity.ERROR,
                )
            )
            continue

        for i, item in enumerate(items):
            prefix = f"{label} {i}: "
            record, record_issues = _record_issues(model, item, entity, i, prefix)
            issues.extend(record_issues)
            if isinstance(record, SessionRecord):
                issues.extend(_session_consistency(record, i, prefix))

        if entity in ("card", "session"):
            issues.extend(_duplicate_ids(items, entity, label))

    streak = _lookup(raw, _STREAK_KEY)
    if streak is not None:
        _, streak_issues = _record_issues(
            StreakRecord, streak, "learning_streak", None, "Learning streak: "
        )
        issues.extend(streak_issues)

    return DataIntegrityResult(issues=issues)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_DROPPED = object()


def _key_variants(key: str) -> tuple[str, ...]:
    return (key, to_snake(key), to_camel(key))


def _prune(record: dict[str, Any], loc: tuple[str | int, ...]) -> None:
    """Remove the value at ``loc`` so the schema default applies instead."""
    target: Any = record
    for step in loc[:-1]:
        if isinstance(target, dict):
            target = next((target[k] for k in _key_variants(str(step)) if k in target), None)
        elif isinstance(target, list) and isinstance(step, int) and step < len(target):
            target = target[step]
        else:
            return

    last = loc[-1]
    if isinstance(target, list) and isinstance(last, int) and last < len(target):
        target[last] = _DROPPED
    elif isinstance(target, dict):
        for k in _key_variants(str(last)):
            target.pop(k, None)


def _sweep(value: Any) -> Any:
    if isinstance(value, list):
        return [_sweep(v) for v in value if v is not _DROPPED]
    if isinstance(value, dict):
        return {k: _sweep(v) for k, v in value.items()}
    return value


def _repaired(item: Any, warnings: list[DataIntegrityIssue]) -> dict[str, Any]:
    if not isinstance(item, Mapping):
        return {}
    record = copy.deepcopy(dict(item))
    for issue in warnings:
        if issue.loc:
            _prune(record, issue.loc)
    return _sweep(record)


def load_snapshot(raw: Any, result: DataIntegrityResult | None = None) -> Snapshot:
    """
    Build a trusted Snapshot from a raw mapping.

    Raises:
        SnapshotValidationError: If any error-severity issue is present.
    """
    result = result or validate(raw)
    if not result.is_valid:
        raise SnapshotValidationError(result)

    for issue in result.warnings:
        logger.warning(f"Integrity warning: {issue.message}")

    by_record: dict[tuple[str, int | None], list[DataIntegrityIssue]] = {}
    for issue in result.warnings:
        by_record.setdefault((issue.entity, issue.index), []).append(issue)

    parsed: dict[str, list[Any]] = {}
    for key, entity, model, _ in _RECORD_LISTS:
        items = _lookup(raw, key) or []
        parsed[key] = [
            model.model_validate(_repaired(item, by_record.get((entity, i), []))).to_domain()
            for i, item in enumerate(items)
        ]

    streak_raw = _lookup(raw, _STREAK_KEY)
    streak_item = _repaired(streak_raw, by_record.get(("learning_streak", None), []))
    streak = StreakRecord.model_validate(streak_item).to_domain()

    return Snapshot(
        cards=parsed["cards"],
        session_history=parsed["session_history"],
        learning_streak=streak,
        achievements=parsed["achievements"],
    )
