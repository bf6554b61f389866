from __future__ import annotations

from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from .models import CatalogEntryRequest
from .quantity_validation import ClientValidationError, ValidationIssue

REQUIRED_FIELDS = ("sku", "name", "brand", "category_id", "uom", "size", "supplier_id", "warehouse_id")


def validate_catalog_entry(payload: CatalogEntryRequest | Mapping[str, Any]) -> CatalogEntryRequest:
    try:
        candidate = (
            payload if isinstance(payload, CatalogEntryRequest) else CatalogEntryRequest.model_validate(payload)
        )
    except PydanticValidationError as exc:
        issue = exc.errors()[0] if exc.errors() else {"loc": ("entry",), "msg": "Invalid entry"}
        field = ".".join(str(part) for part in issue.get("loc", ("entry",)))
        raise ClientValidationError([ValidationIssue(row_index=None, field=field, reason=issue.get("msg", ""))]) from exc

    issues: list[ValidationIssue] = []
    trimmed: dict[str, str | None] = {}
    for name in REQUIRED_FIELDS:
        value = (getattr(candidate, name) or "").strip()
        if not value:
            issues.append(ValidationIssue(row_index=None, field=name, reason=f"{name} is required", code="REQUIRED"))
        trimmed[name] = value or None
    for name in ("opening_qty", "qty_per_pack"):
        if getattr(candidate, name) < 0:
            issues.append(ValidationIssue(row_index=None, field=name, reason=f"{name} must not be negative"))
    if candidate.unit_price < 0:
        issues.append(ValidationIssue(row_index=None, field="unit_price", reason="unit_price must not be negative"))
    if issues:
        raise ClientValidationError(issues)
    return candidate.model_copy(update=trimmed)
