from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..exceptions import NotFoundError
from ..idempotency import IDEMPOTENCY_HEADER
from ..models import (
    CommitAck,
    CommitContext,
    CommitLine,
    CommitRequest,
    LookupResult,
    MovementType,
    QuantityUpdateRequest,
    StockMovementRequest,
    Warehouse,
)
from .base import BaseClient, expect_object, expect_rows


@dataclass
class InventoryClient(BaseClient):
    """Lookup and stock-mutation endpoints; implements both engine gateways."""

    def list_warehouses(self) -> list[Warehouse]:
        payload = self._request("GET", "/warehouses", module="inventory", operation="list_warehouses")
        return [Warehouse.model_validate(row) for row in expect_rows(payload, "warehouse list")]

    def lookup(self, identifier: str, warehouse_id: str) -> LookupResult:
        payload = self._request(
            "GET",
            "/inventory/lookup",
            params={"barcode": identifier, "warehouse_id": warehouse_id},
            module="inventory",
            operation="lookup",
        )
        # A 200 with an empty body or no product is still "no match".
        if not payload or (isinstance(payload, dict) and not payload.get("product")):
            raise NotFoundError(
                code="NOT_FOUND",
                message=f"No product matches '{identifier}'",
                details={"identifier": identifier, "warehouse_id": warehouse_id},
                trace_id=self.http.trace.trace_id if self.http.trace else None,
                status_code=404,
            )
        return LookupResult.model_validate(expect_object(payload, "lookup"))

    def commit_batch(
        self,
        lines: Sequence[CommitLine],
        context: CommitContext,
        *,
        batch_id: str,
        idempotency_key: str,
    ) -> CommitAck:
        request = CommitRequest(
            batch_id=batch_id,
            warehouse_id=context.warehouse_id,
            account_id=context.account_id,
            transaction_type=context.transaction_type,
            source_doc=context.source_doc,
            lines=list(lines),
        )
        data = self._request(
            "POST",
            "/inventory/transactions",
            json_body=request.model_dump(mode="json", exclude_none=True),
            headers={IDEMPOTENCY_HEADER: idempotency_key},
            module="inventory",
            operation="commit_batch",
        )
        return CommitAck.model_validate(data or {"batch_id": batch_id})

    def update_quantity(
        self,
        inventory_id: str,
        new_quantity: int,
        *,
        source_doc: str | None,
        transaction_id: str,
        idempotency_key: str,
    ) -> CommitAck:
        request = QuantityUpdateRequest(
            transaction_id=transaction_id,
            inventory_id=inventory_id,
            new_quantity=new_quantity,
            source_doc=source_doc,
        )
        data = self._request(
            "PUT",
            f"/inventory/{inventory_id}/quantity",
            json_body=request.model_dump(mode="json", exclude_none=True),
            headers={IDEMPOTENCY_HEADER: idempotency_key},
            module="inventory",
            operation="update_quantity",
        )
        return CommitAck.model_validate(data or {"batch_id": transaction_id})

    def publish_movement(
        self,
        *,
        product_id: str,
        warehouse_id: str,
        qty: int,
        movement_type: MovementType | str,
        transaction_id: str,
        idempotency_key: str,
    ) -> CommitAck:
        request = StockMovementRequest(
            transaction_id=transaction_id,
            product_id=product_id,
            warehouse_id=warehouse_id,
            qty=qty,
            movement_type=MovementType(movement_type),
        )
        data = self._request(
            "POST",
            "/inventory/movements",
            json_body=request.model_dump(mode="json", exclude_none=True),
            headers={IDEMPOTENCY_HEADER: idempotency_key},
            module="inventory",
            operation="publish_movement",
        )
        return CommitAck.model_validate(data or {"batch_id": transaction_id})


def default_warehouse_id(warehouses: Sequence[Warehouse]) -> str | None:
    """Pre-select the warehouse when there is exactly one to choose from."""
    if len(warehouses) == 1:
        return warehouses[0].id
    return None
