from __future__ import annotations

from decimal import Decimal

import pytest

from warehouse_scan_sdk.catalog_validation import validate_catalog_entry
from warehouse_scan_sdk.quantity_validation import ClientValidationError, parse_quantity


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, 0), (7, 7), ("12", 12), (" 3 ", 3), (4.0, 4), (Decimal("5.00"), 5)],
)
def test_parse_quantity_accepts_whole_numbers(value, expected: int) -> None:
    assert parse_quantity(value) == expected


@pytest.mark.parametrize("value", [-1, "-2", 2.5, "abc", "", None, True, float("nan"), "inf", [1]])
def test_parse_quantity_rejects(value) -> None:
    with pytest.raises(ValueError):
        parse_quantity(value)


def _entry(**overrides) -> dict:
    entry = {
        "sku": " NEW-1 ",
        "name": "Anchor",
        "brand": "Fixa",
        "category_id": "C-1",
        "uom": "ea",
        "size": "M8",
        "supplier_id": "S-1",
        "warehouse_id": "WH-1",
    }
    entry.update(overrides)
    return entry


def test_validate_catalog_entry_trims_required_fields() -> None:
    request = validate_catalog_entry(_entry(opening_qty=5, unit_price="2.50"))
    assert request.sku == "NEW-1"
    assert request.opening_qty == 5
    assert request.unit_price == Decimal("2.50")


def test_validate_catalog_entry_collects_every_issue() -> None:
    with pytest.raises(ClientValidationError) as excinfo:
        validate_catalog_entry(_entry(brand="  ", supplier_id=None, opening_qty=-1, unit_price="-3"))

    fields = [issue.field for issue in excinfo.value.issues]
    assert fields == ["brand", "supplier_id", "opening_qty", "unit_price"]
    assert excinfo.value.issues[0].code == "REQUIRED"
    assert str(excinfo.value) == "payload brand: brand is required"


def test_validate_catalog_entry_reports_type_errors() -> None:
    with pytest.raises(ClientValidationError) as excinfo:
        validate_catalog_entry(_entry(opening_qty="many"))
    assert excinfo.value.issues[0].field == "opening_qty"
