from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    CommitError,
    ConflictError,
    LookupFailedError,
    LookupNotFoundError,
    NotFoundError,
    RateLimitError,
    ReconciliationError,
    ServerError,
    ValidationError,
)

GENERIC_MESSAGES = {
    "lookup": "Product lookup failed",
    "refresh": "Could not refresh stock after commit",
    "commit": "Batch submission failed",
    "update_quantity": "Stock update failed",
    "create_catalog_entry": "Product creation failed",
}


def map_error(status_code: int, payload: Mapping[str, object] | None, trace_id: str | None) -> ApiError:
    payload = payload or {}
    code = str(payload.get("code") or payload.get("errorCode") or "HTTP_ERROR")
    message = _payload_message(payload) or "Request failed"
    details = payload.get("details")
    payload_trace_id = payload.get("trace_id")
    resolved_trace_id = str(payload_trace_id) if payload_trace_id is not None else trace_id
    mapped: type[ApiError]
    if status_code == 404:
        mapped = NotFoundError
    elif status_code in {400, 422}:
        mapped = ValidationError
    elif status_code == 409:
        mapped = ConflictError
    elif status_code == 429:
        mapped = RateLimitError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = ApiError
    return mapped(
        code=code,
        message=message,
        details=details,
        trace_id=resolved_trace_id,
        status_code=status_code,
        raw_payload=dict(payload),
    )


def _payload_message(payload: Mapping[str, object]) -> str | None:
    # Backends answer with either {"message": ...} or a {"body": {"message": ...}} envelope.
    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    body = payload.get("body")
    if isinstance(body, Mapping):
        nested = body.get("message")
        if isinstance(nested, str) and nested.strip():
            return nested.strip()
    return None


def collaborator_message(exc: BaseException, operation: str) -> str:
    """Message to show for a collaborator failure: verbatim when it has one."""
    if isinstance(exc, (ApiError, ReconciliationError)) and exc.message and exc.message.strip():
        return exc.message.strip()
    text = str(exc).strip()
    if text and not isinstance(exc, (ApiError, ReconciliationError)):
        return text
    return GENERIC_MESSAGES.get(operation, "Request failed")


def to_reconciliation_error(exc: BaseException, *, operation: str) -> ReconciliationError:
    if isinstance(exc, ReconciliationError):
        return exc
    message = collaborator_message(exc, operation)
    trace_id = getattr(exc, "trace_id", None)
    details = _details(exc)
    if operation in {"lookup", "refresh"}:
        if isinstance(exc, NotFoundError):
            return LookupNotFoundError(message=message, details=details, trace_id=trace_id)
        return LookupFailedError(message=message, details=details, trace_id=trace_id)
    return CommitError(message=message, details=details, trace_id=trace_id)


def _details(exc: BaseException) -> object | None:
    if isinstance(exc, ApiError):
        summary = f"{exc.code} (HTTP {exc.status_code})"
        return f"{summary}: {exc.details}" if exc.details else summary
    return type(exc).__name__
