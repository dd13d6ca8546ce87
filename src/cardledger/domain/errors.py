"""Error taxonomy shared by every layer."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cardledger.domain.integrity import DataIntegrityResult


class CardLedgerError(Exception):
    """Base class for all cardledger errors."""


class NotFoundError(CardLedgerError, LookupError):
    pass


class CardNotFoundError(NotFoundError):
    def __init__(self, card_id: str):
        super().__init__(f"Card not found: {card_id}")
        self.card_id = card_id


class SessionNotFoundError(NotFoundError):
    def __init__(self, session_id: str, message: str | None = None):
        super().__init__(message or f"Session not found: {session_id}")
        self.session_id = session_id


class SessionClosedError(SessionNotFoundError):
    """Raised when a transition targets a session that has already ended."""

    def __init__(self, session_id: str):
        super().__init__(session_id, f"Session already ended: {session_id}")


class InvalidReviewQualityError(CardLedgerError, ValueError):
    def __init__(self, quality: object):
        super().__init__(f"Review quality must be an integer in 0..4, got {quality!r}")
        self.quality = quality


class InvalidCardError(CardLedgerError, ValueError):
    pass


class SnapshotValidationError(CardLedgerError):
    """Raised when a snapshot carries error-severity integrity issues."""

    def __init__(self, result: "DataIntegrityResult"):
        errors = result.errors
        summary = "; ".join(issue.message for issue in errors[:3])
        if len(errors) > 3:
            summary += f" (+{len(errors) - 3} more)"
        super().__init__(f"Snapshot failed validation with {len(errors)} error(s): {summary}")
        self.result = result


class StorageError(CardLedgerError):
    pass
