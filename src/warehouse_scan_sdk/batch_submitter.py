from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

from .error_mapper import to_reconciliation_error
from .exceptions import CommitError, EmptyBatchError, MissingContextError, MissingSelectionError, NoValidLinesError
from .gateways import CommitGateway
from .idempotency import resolve_batch_keys
from .line_items import LineItem, LineItemStore
from .models import CommitAck, CommitContext, CommitLine
from .workflows import CommitStrategy, MergeMode, Workflow

if TYPE_CHECKING:
    from .engine import LookupOutcome

logger = logging.getLogger(__name__)

Refresher = Callable[[LineItem, str], "LookupOutcome"]


@dataclass(frozen=True)
class LineRejection:
    item_id: int | None
    product_id: str | None
    message: str
    code: str | None = None


@dataclass(frozen=True)
class CommitOutcome:
    batch_id: str
    workflow: str
    lines: tuple[CommitLine, ...]
    committed_ids: tuple[int, ...]
    skipped_ids: tuple[int, ...] = ()
    rejected: tuple[LineRejection, ...] = ()
    refresh_failures: tuple[LineRejection, ...] = ()
    ack: CommitAck | None = None

    @property
    def partial(self) -> bool:
        return bool(self.rejected or self.refresh_failures)

    @property
    def ok(self) -> bool:
        return not self.partial


@dataclass(frozen=True)
class BatchSubmitter:
    """Turns store contents into one commit call and folds the answer back in.

    Holds only its collaborator and workflow; nothing survives between calls.
    """

    gateway: CommitGateway
    workflow: Workflow

    def resolve_context(self, context: CommitContext | None) -> CommitContext:
        context = context or CommitContext()
        missing = [name for name in self.workflow.required_context if not (getattr(context, name) or "").strip()]
        if missing:
            raise MissingContextError(
                message=f"Select {' and '.join(name.replace('_id', '') for name in missing)} before submitting",
                details={"missing": missing, "workflow": self.workflow.name},
            )
        if context.transaction_type is None:
            context = context.model_copy(update={"transaction_type": self.workflow.transaction_type})
        return context

    def build_lines(self, items: Sequence[LineItem]) -> tuple[list[CommitLine], list[LineItem], list[int]]:
        lines: list[CommitLine] = []
        eligible: list[LineItem] = []
        skipped: list[int] = []
        for item in items:
            if not self.workflow.accepts_quantity(item.quantity):
                skipped.append(item.id)
                continue
            eligible.append(item)
            lines.append(
                CommitLine(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    barcode=item.barcode,
                    inventory_id=item.inventory_id,
                )
            )
        return lines, eligible, skipped

    def commit(
        self,
        store: LineItemStore,
        context: CommitContext | None,
        *,
        refresher: Refresher | None = None,
    ) -> CommitOutcome:
        items = store.all()
        if not items:
            raise EmptyBatchError(message="No items to submit")
        resolved = self.resolve_context(context)
        lines, eligible, skipped = self.build_lines(items)
        if not lines:
            raise NoValidLinesError(
                message="All quantities are invalid or zero",
                details={"skipped": skipped},
            )
        if self.workflow.strategy is CommitStrategy.REFRESH_IN_PLACE and refresher is None:
            raise ValueError(f"workflow '{self.workflow.name}' needs a refresher to re-read committed rows")

        keys = resolve_batch_keys(resolved.batch_id, resolved.idempotency_key)
        logger.info(
            "commit_attempt",
            extra={"workflow": self.workflow.name, "batch_id": keys.batch_id, "line_count": len(lines)},
        )
        try:
            ack = self.gateway.commit_batch(
                lines,
                resolved,
                batch_id=keys.batch_id,
                idempotency_key=keys.idempotency_key,
            )
        except Exception as exc:
            error = to_reconciliation_error(exc, operation="commit")
            logger.warning("commit_failure", extra={"batch_id": keys.batch_id, "error_code": error.code})
            raise error from exc

        rejected = self._rejections(store, ack)
        rejected_products = {rejection.product_id for rejection in rejected}
        confirmed = [item for item in eligible if item.product_id not in rejected_products]
        if not confirmed:
            first = rejected[0] if rejected else None
            raise CommitError(
                message=(first.message if first else None) or ack.message or "Every line was rejected",
                details={"rejected": [rejection.product_id for rejection in rejected]},
                trace_id=ack.trace_id,
            )

        refresh_failures: tuple[LineRejection, ...] = ()
        if self.workflow.strategy is CommitStrategy.CLEAR:
            # Only the snapshot that was sent is consumed; rows scanned meanwhile stay.
            store.settle(confirmed if rejected else items)
        else:
            refresh_failures = self._refresh(confirmed, resolved, refresher)

        outcome = CommitOutcome(
            batch_id=ack.batch_id or keys.batch_id,
            workflow=self.workflow.name,
            lines=tuple(lines),
            committed_ids=tuple(item.id for item in confirmed),
            skipped_ids=tuple(skipped),
            rejected=rejected,
            refresh_failures=refresh_failures,
            ack=ack,
        )
        logger.info(
            "commit_success",
            extra={
                "batch_id": outcome.batch_id,
                "committed": len(outcome.committed_ids),
                "rejected": len(outcome.rejected),
                "trace_id": ack.trace_id,
            },
        )
        return outcome

    def update_quantity(
        self,
        store: LineItemStore,
        item_id: int,
        context: CommitContext | None,
        *,
        refresher: Refresher,
    ) -> CommitOutcome:
        """Single-row stock correction: send the row's quantity as the new stock level."""
        if self.workflow.mode is not MergeMode.ABSOLUTE:
            raise ValueError(
                f"workflow '{self.workflow.name}' holds quantity deltas; update_quantity needs stock levels"
            )
        item = store.get(item_id)
        if item is None:
            raise MissingSelectionError(message="Select a row first")
        if not item.inventory_id:
            raise MissingContextError(
                message=f"{item.product_name or item.product_id} has no inventory record in this warehouse",
                details={"item_id": item_id},
            )
        resolved = self.resolve_context(context)
        keys = resolve_batch_keys(resolved.batch_id, resolved.idempotency_key)
        logger.info("update_quantity_attempt", extra={"inventory_id": item.inventory_id, "batch_id": keys.batch_id})
        try:
            ack = self.gateway.update_quantity(
                item.inventory_id,
                item.quantity,
                source_doc=resolved.source_doc,
                transaction_id=keys.batch_id,
                idempotency_key=keys.idempotency_key,
            )
        except Exception as exc:
            error = to_reconciliation_error(exc, operation="update_quantity")
            logger.warning("update_quantity_failure", extra={"inventory_id": item.inventory_id, "error_code": error.code})
            raise error from exc

        line = CommitLine(
            product_id=item.product_id,
            quantity=item.quantity,
            barcode=item.barcode,
            inventory_id=item.inventory_id,
        )
        return CommitOutcome(
            batch_id=ack.batch_id or keys.batch_id,
            workflow=self.workflow.name,
            lines=(line,),
            committed_ids=(item.id,),
            refresh_failures=self._refresh([item], resolved, refresher),
            ack=ack,
        )

    @staticmethod
    def _rejections(store: LineItemStore, ack: CommitAck) -> tuple[LineRejection, ...]:
        rejections = []
        for result in ack.line_results or []:
            if not result.rejected:
                continue
            match = store.find_by_product(result.product_id) if result.product_id else None
            rejections.append(
                LineRejection(
                    item_id=match.id if match else None,
                    product_id=result.product_id,
                    message=result.message or "Line rejected",
                    code=result.code,
                )
            )
        return tuple(rejections)

    @staticmethod
    def _refresh(
        items: Sequence[LineItem],
        context: CommitContext,
        refresher: Refresher | None,
    ) -> tuple[LineRejection, ...]:
        if refresher is None:
            return ()
        failures = []
        for item in items:
            # Server-side derivations (pack formulas, totals) only come back through a lookup.
            outcome = refresher(item, context.warehouse_id or "")
            if outcome.error is not None:
                failures.append(
                    LineRejection(
                        item_id=item.id,
                        product_id=item.product_id,
                        message=outcome.error.message,
                        code=outcome.error.code,
                    )
                )
        return tuple(failures)
