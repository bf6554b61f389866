from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .batch_submitter import BatchSubmitter, CommitOutcome
from .catalog_validation import validate_catalog_entry
from .error_mapper import to_reconciliation_error
from .exceptions import AlreadySubmittingError, LookupFailedError, LookupNotFoundError, MissingSelectionError, ReconciliationError
from .gateways import CatalogGateway, CommitGateway, LookupGateway
from .line_items import DraftEdit, EditReport, LineItem, LineItemStore
from .models import CatalogEntryRequest, CommitContext, LookupResult, Product
from .session_state import (
    SessionActionAvailability,
    SessionState,
    ensure_transition,
    session_action_availability,
    settled_state,
)
from .workflows import ORDER_WORKFLOW, Workflow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupOutcome:
    """Result of a lookup; lookup failures are reported here and never raised."""

    state: SessionState | None
    item: LineItem | None = None
    error: ReconciliationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> str:
        return self.error.code if self.error is not None else "FOUND"


class ReconciliationEngine:
    """Lookup → merge → edit → commit for one workflow session.

    Overlapping lookups are allowed and apply in completion order; commits are
    serialized by a busy flag.
    """

    def __init__(
        self,
        lookup: LookupGateway,
        workflow: Workflow = ORDER_WORKFLOW,
        *,
        committer: CommitGateway | None = None,
        catalog: CatalogGateway | None = None,
        store: LineItemStore | None = None,
        default_context: CommitContext | None = None,
    ) -> None:
        if store is not None and store.mode is not workflow.mode:
            raise ValueError(f"store mode {store.mode.value} does not match workflow {workflow.name}")
        self.lookup_gateway = lookup
        self.workflow = workflow
        self.catalog = catalog
        self.default_context = default_context
        self.store = store if store is not None else LineItemStore(mode=workflow.mode)
        self.submitter = BatchSubmitter(committer, workflow) if committer is not None else None
        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._pending_lookups = 0
        self._submitting = False
        self.last_lookup_state: SessionState | None = None

    @property
    def state(self) -> SessionState:
        with self._lock:
            if self._state in {SessionState.IDLE, SessionState.EDITING}:
                return settled_state(len(self.store) > 0)
            return self._state

    @property
    def submitting(self) -> bool:
        return self._submitting

    def availability(self) -> SessionActionAvailability:
        return session_action_availability(self.state, has_items=len(self.store) > 0)

    def lookup_and_merge(self, barcode: str | None, warehouse_id: str | None = None) -> LookupOutcome:
        identifier = (barcode or "").strip()
        if warehouse_id is None and self.default_context is not None:
            warehouse_id = self.default_context.warehouse_id
        if not identifier or not (warehouse_id or "").strip():
            # Rejected before any remote call.
            missing = [name for name, value in (("warehouse", (warehouse_id or "").strip()), ("barcode", identifier)) if not value]
            return LookupOutcome(
                state=None,
                error=MissingSelectionError(
                    message="Select warehouse and enter SKU",
                    details={"missing": missing},
                ),
            )

        self._begin_lookup()
        logger.info("lookup_attempt", extra={"barcode": identifier, "warehouse_id": warehouse_id})
        try:
            result = self.lookup_gateway.lookup(identifier, warehouse_id)
        except Exception as exc:
            error = to_reconciliation_error(exc, operation="lookup")
            state = SessionState.NOT_FOUND if isinstance(error, LookupNotFoundError) else SessionState.SEARCH_ERROR
            logger.info("lookup_miss", extra={"barcode": identifier, "error_code": error.code})
            self._end_lookup(state)
            return LookupOutcome(state=state, error=error)

        try:
            item = self.store.merge(result, barcode=identifier)
        finally:
            self._end_lookup(SessionState.FOUND)
        logger.info("lookup_success", extra={"barcode": identifier, "product_id": item.product_id, "item_id": item.id})
        return LookupOutcome(state=SessionState.FOUND, item=item)

    def refresh_after_commit(self, item: LineItem, warehouse_id: str | None) -> LookupOutcome:
        identifier = item.lookup_key
        if not identifier or not (warehouse_id or "").strip():
            return LookupOutcome(
                state=None,
                error=MissingSelectionError(message="Cannot refresh a row without SKU and warehouse"),
            )
        try:
            result = self.lookup_gateway.lookup(identifier, warehouse_id)
        except Exception as exc:
            error = to_reconciliation_error(exc, operation="refresh")
            logger.warning("refresh_failure", extra={"item_id": item.id, "error_code": error.code})
            state = SessionState.NOT_FOUND if isinstance(error, LookupNotFoundError) else SessionState.SEARCH_ERROR
            return LookupOutcome(state=state, error=error)
        if result.product.id != item.product_id:
            return LookupOutcome(
                state=SessionState.SEARCH_ERROR,
                error=LookupFailedError(
                    message=f"'{identifier}' now resolves to a different product",
                    details={"expected": item.product_id, "actual": result.product.id},
                ),
            )
        refreshed = self.store.replace_stock(item.id, result.inventory)
        if refreshed is None:
            # Row removed while the refresh was in flight; nothing to update.
            return LookupOutcome(state=SessionState.FOUND, item=None)
        return LookupOutcome(state=SessionState.FOUND, item=refreshed)

    def add_catalog_product(self, product: Product | Mapping[str, Any]) -> LineItem:
        """Merge a catalog search hit that carries no inventory snapshot."""
        model = product if isinstance(product, Product) else Product.model_validate(product)
        return self.store.merge(LookupResult(product=model), barcode=model.sku)

    def create_product_and_merge(self, entry: CatalogEntryRequest | Mapping[str, Any]) -> LookupOutcome:
        if self.catalog is None:
            raise RuntimeError("engine was built without a catalog gateway")
        request = validate_catalog_entry(entry)
        logger.info("catalog_create_attempt", extra={"sku": request.sku, "warehouse_id": request.warehouse_id})
        try:
            created = self.catalog.create_catalog_entry(request)
        except Exception as exc:
            raise to_reconciliation_error(exc, operation="create_catalog_entry") from exc
        logger.info("catalog_create_success", extra={"sku": request.sku, "product_id": created.product_id})
        return self.lookup_and_merge(request.sku, request.warehouse_id)

    def apply_edits(self, edits: Iterable[DraftEdit | Mapping[str, Any]]) -> EditReport:
        return self.store.apply_edits(edits)

    def set_quantity(self, item_id: int, value: Any) -> EditReport:
        return self.store.apply_edits([DraftEdit(id=item_id, field="quantity", value=value)])

    def remove(self, item_id: int) -> bool:
        return self.store.remove(item_id)

    def reset(self) -> None:
        self.store.clear()

    def commit(self, context: CommitContext | Mapping[str, Any] | None = None) -> CommitOutcome:
        submitter = self._require_submitter()
        resolved = self._resolve_context(context)
        self._begin_submit()
        try:
            return submitter.commit(self.store, resolved, refresher=self.refresh_after_commit)
        finally:
            self._end_submit()

    def update_quantity(self, item_id: int, context: CommitContext | Mapping[str, Any] | None = None) -> CommitOutcome:
        submitter = self._require_submitter()
        resolved = self._resolve_context(context)
        self._begin_submit()
        try:
            return submitter.update_quantity(self.store, item_id, resolved, refresher=self.refresh_after_commit)
        finally:
            self._end_submit()

    def _resolve_context(self, context: CommitContext | Mapping[str, Any] | None) -> CommitContext | None:
        given = _context(context)
        if self.default_context is None:
            return given
        if given is None:
            return self.default_context
        # Configured defaults only fill fields the caller left unset.
        fills = {
            name: value
            for name, value in self.default_context.model_dump().items()
            if value is not None and getattr(given, name) is None
        }
        return given.model_copy(update=fills) if fills else given

    def _require_submitter(self) -> BatchSubmitter:
        if self.submitter is None:
            raise RuntimeError("engine was built without a commit gateway")
        return self.submitter

    def _begin_lookup(self) -> None:
        with self._lock:
            self._pending_lookups += 1
            if self._state is not SessionState.SUBMITTING:
                self._state = ensure_transition(self._state, SessionState.SEARCHING)

    def _end_lookup(self, terminal: SessionState) -> None:
        with self._lock:
            self._pending_lookups -= 1
            self.last_lookup_state = terminal
            if self._state is SessionState.SUBMITTING or self._pending_lookups > 0:
                return
            ensure_transition(self._state, terminal)
            self._state = ensure_transition(terminal, settled_state(len(self.store) > 0))

    def _begin_submit(self) -> None:
        with self._lock:
            if self._submitting:
                raise AlreadySubmittingError(message="A submission is already in progress")
            self._submitting = True
            self._state = ensure_transition(self._state, SessionState.SUBMITTING)

    def _end_submit(self) -> None:
        with self._lock:
            self._submitting = False
            if self._pending_lookups > 0:
                self._state = ensure_transition(self._state, SessionState.SEARCHING)
            else:
                self._state = ensure_transition(self._state, settled_state(len(self.store) > 0))


def _context(context: CommitContext | Mapping[str, Any] | None) -> CommitContext | None:
    if context is None or isinstance(context, CommitContext):
        return context
    return CommitContext.model_validate(dict(context))
