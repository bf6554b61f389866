from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any


@dataclass(frozen=True)
class ValidationIssue:
    row_index: int | None
    field: str
    reason: str
    code: str = "INVALID"


class ClientValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.issues:
            return "Validation failed"
        issue = self.issues[0]
        location = f"row {issue.row_index}" if issue.row_index is not None else "payload"
        return f"{location} {issue.field}: {issue.reason}"


def parse_quantity(value: Any) -> int:
    """Coerce a manually entered quantity to a non-negative int.

    Accepts ints, integral floats/decimals and digit strings. Raises ``ValueError``
    for anything else; values are never clamped.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError("quantity must be a whole number")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, (float, Decimal, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError("quantity must be a whole number") from exc
        if not number.is_finite() or number != number.to_integral_value():
            raise ValueError("quantity must be a whole number")
        parsed = int(number)
    else:
        raise ValueError("quantity must be a whole number")
    if parsed < 0:
        raise ValueError("quantity must not be negative")
    return parsed

