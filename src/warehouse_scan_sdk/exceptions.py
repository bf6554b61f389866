from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None
    trace_id: str | None
    status_code: int
    raw_payload: object | None = None

    def __str__(self) -> str:
        trace = f" trace_id={self.trace_id}" if self.trace_id else ""
        return f"[{self.status_code}] {self.code}: {self.message}{trace}"


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    pass


class ConflictError(ApiError):
    """409 or conflict-style errors."""


class RateLimitError(ApiError):
    """429 throttling error."""


class ServerError(ApiError):
    """5xx server-side failures."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


@dataclass
class ReconciliationError(Exception):
    """Base of the engine taxonomy. ``code`` is stable and safe to branch on."""

    message: str
    details: object | None = None
    trace_id: str | None = None

    code: ClassVar[str] = "RECONCILIATION_ERROR"

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class MissingSelectionError(ReconciliationError):
    code = "MISSING_SELECTION"


class LookupNotFoundError(ReconciliationError):
    code = "NOT_FOUND"


class LookupFailedError(ReconciliationError):
    code = "SEARCH_ERROR"


class InvalidQuantityError(ReconciliationError):
    code = "INVALID_QUANTITY"


class EmptyBatchError(ReconciliationError):
    code = "EMPTY_BATCH"


class NoValidLinesError(ReconciliationError):
    code = "NO_VALID_LINES"


class MissingContextError(ReconciliationError):
    code = "MISSING_CONTEXT"


class CommitError(ReconciliationError):
    code = "COMMIT_ERROR"


class AlreadySubmittingError(ReconciliationError):
    code = "ALREADY_SUBMITTING"
