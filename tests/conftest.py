from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Sequence

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BASE_DIR / "src"))

from warehouse_scan_sdk.config import ClientConfig  # noqa: E402
from warehouse_scan_sdk.exceptions import NotFoundError, ServerError  # noqa: E402
from warehouse_scan_sdk.models import (  # noqa: E402
    CommitAck,
    CommitContext,
    CommitLine,
    CommitLineResult,
    InventorySnapshot,
    LookupResult,
    Product,
)


def lookup_result(
    product_id: str,
    *,
    sku: str | None = None,
    name: str | None = None,
    current: int = 0,
    previous: int = 0,
    inventory_id: str | None = None,
    qty_per_pack: int | None = None,
) -> LookupResult:
    return LookupResult(
        product=Product(id=product_id, sku=sku or f"SKU-{product_id}", name=name or f"Product {product_id}"),
        inventory=InventorySnapshot(
            id=inventory_id or f"I-{product_id}",
            current_quantity=current,
            previous_quantity=previous,
            qty_per_pack=qty_per_pack,
            total_packs=(current // qty_per_pack) if qty_per_pack else None,
        ),
    )


class FakeWarehouseBackend:
    """In-memory lookup + commit collaborator that records every remote call."""

    def __init__(self) -> None:
        self.products: dict[str, LookupResult] = {}
        self.lookups: list[tuple[str, str]] = []
        self.commits: list[tuple[list[CommitLine], CommitContext, str]] = []
        self.updates: list[tuple[str, int, str | None]] = []
        self.fail_commit_with: Exception | None = None
        self.fail_lookup_with: Exception | None = None
        self.reject_products: dict[str, str] = {}
        self.commit_gate: threading.Event | None = None
        self.commit_started = threading.Event()

    def add(self, result: LookupResult, *aliases: str) -> None:
        for key in (result.product.id, result.product.sku, *aliases):
            if key:
                self.products[key] = result

    def lookup(self, identifier: str, warehouse_id: str) -> LookupResult:
        self.lookups.append((identifier, warehouse_id))
        if self.fail_lookup_with is not None:
            raise self.fail_lookup_with
        try:
            return self.products[identifier]
        except KeyError:
            raise NotFoundError(
                code="NOT_FOUND",
                message=f"No product with barcode {identifier}",
                details=None,
                trace_id=None,
                status_code=404,
            ) from None

    def commit_batch(
        self,
        lines: Sequence[CommitLine],
        context: CommitContext,
        *,
        batch_id: str,
        idempotency_key: str,
    ) -> CommitAck:
        self.commit_started.set()
        if self.commit_gate is not None:
            self.commit_gate.wait(timeout=5)
        self.commits.append((list(lines), context, idempotency_key))
        if self.fail_commit_with is not None:
            raise self.fail_commit_with
        results = []
        for line in lines:
            if line.product_id in self.reject_products:
                results.append(
                    CommitLineResult(product_id=line.product_id, status="REJECTED", message=self.reject_products[line.product_id])
                )
                continue
            results.append(CommitLineResult(product_id=line.product_id, status="OK"))
            if context.transaction_type is not None and context.transaction_type.value == "Adjustment":
                self._set_stock(line.product_id, line.quantity)
        return CommitAck(batch_id=batch_id, processed=len(lines), line_results=results)

    def update_quantity(
        self,
        inventory_id: str,
        new_quantity: int,
        *,
        source_doc: str | None,
        transaction_id: str,
        idempotency_key: str,
    ) -> CommitAck:
        self.updates.append((inventory_id, new_quantity, source_doc))
        if self.fail_commit_with is not None:
            raise self.fail_commit_with
        for result in self.products.values():
            if result.inventory is not None and result.inventory.id == inventory_id:
                self._set_stock(result.product.id, new_quantity)
                break
        return CommitAck(batch_id=transaction_id, processed=1)

    def _set_stock(self, product_id: str, quantity: int) -> None:
        current = self.products[product_id]
        inventory = current.inventory or InventorySnapshot()
        per_pack = inventory.qty_per_pack
        updated = LookupResult(
            product=current.product,
            inventory=inventory.model_copy(
                update={
                    "previous_quantity": inventory.current_quantity,
                    "current_quantity": quantity,
                    "total_packs": (quantity // per_pack) if per_pack else None,
                }
            ),
        )
        for key, value in list(self.products.items()):
            if value.product.id == product_id:
                self.products[key] = updated


@pytest.fixture
def backend() -> FakeWarehouseBackend:
    return FakeWarehouseBackend()


@pytest.fixture
def server_error() -> ServerError:
    return ServerError(
        code="SERVER_ERROR",
        message="Insufficient stock for SKU-P1",
        details=None,
        trace_id="trace-500",
        status_code=500,
    )


@pytest.fixture
def http_config() -> ClientConfig:
    return ClientConfig(env_name="test", api_base_url="https://api.example.com", retries=2, retry_backoff_seconds=0)
