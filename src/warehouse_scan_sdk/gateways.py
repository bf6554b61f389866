from __future__ import annotations

from typing import Protocol, Sequence

from .models import CatalogEntryRequest, CatalogEntryResponse, CommitAck, CommitContext, CommitLine, LookupResult


class LookupGateway(Protocol):
    def lookup(self, identifier: str, warehouse_id: str) -> LookupResult: ...


class CommitGateway(Protocol):
    def commit_batch(
        self,
        lines: Sequence[CommitLine],
        context: CommitContext,
        *,
        batch_id: str,
        idempotency_key: str,
    ) -> CommitAck: ...

    def update_quantity(
        self,
        inventory_id: str,
        new_quantity: int,
        *,
        source_doc: str | None,
        transaction_id: str,
        idempotency_key: str,
    ) -> CommitAck: ...


class CatalogGateway(Protocol):
    def create_catalog_entry(self, entry: CatalogEntryRequest) -> CatalogEntryResponse: ...
