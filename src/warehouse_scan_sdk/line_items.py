from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .exceptions import InvalidQuantityError
from .models import InventorySnapshot, LookupResult
from .quantity_validation import ValidationIssue, parse_quantity
from .workflows import MergeMode

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"quantity"})


@dataclass(frozen=True)
class LineItem:
    id: int
    product_id: str
    sku: str | None
    product_name: str | None
    quantity: int
    current_stock: int = 0
    previous_quantity: int = 0
    inventory_id: str | None = None
    qty_per_pack: int | None = None
    total_packs: int | None = None
    barcode: str | None = None

    @property
    def lookup_key(self) -> str | None:
        return self.sku or self.barcode


@dataclass(frozen=True)
class DraftEdit:
    id: int
    field: str
    value: Any

    @classmethod
    def coerce(cls, raw: DraftEdit | Mapping[str, Any]) -> DraftEdit:
        if isinstance(raw, DraftEdit):
            return raw
        return cls(id=raw["id"], field=str(raw.get("field", "quantity")), value=raw.get("value"))


@dataclass(frozen=True)
class EditReport:
    applied: tuple[int, ...] = ()
    dropped: tuple[int, ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    def error(self) -> InvalidQuantityError | None:
        rejected = [issue for issue in self.issues if issue.code == "INVALID_QUANTITY"]
        if not rejected:
            return None
        return InvalidQuantityError(
            message=rejected[0].reason,
            details={"item_ids": [issue.row_index for issue in rejected]},
        )


@dataclass(frozen=True)
class StoreChange:
    version: int
    action: str
    item_ids: tuple[int, ...]


StoreListener = Callable[[StoreChange], None]


def _stock(value: int | None) -> int:
    return max(int(value or 0), 0)


@dataclass
class LineItemStore:
    """Ordered line items, at most one per product.

    Mutating calls hold a re-entrant lock so they never interleave, and each call
    that changed something bumps ``version`` once and notifies subscribers.
    """

    mode: MergeMode = MergeMode.INCREMENT
    _items: dict[str, LineItem] = field(default_factory=dict, init=False, repr=False)
    _ids: Iterator[int] = field(default_factory=lambda: itertools.count(1), init=False, repr=False)
    _listeners: list[StoreListener] = field(default_factory=list, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)
    version: int = field(default=0, init=False)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self.all())

    def all(self) -> tuple[LineItem, ...]:
        with self._lock:
            return tuple(self._items.values())

    def get(self, item_id: int) -> LineItem | None:
        with self._lock:
            return next((item for item in self._items.values() if item.id == item_id), None)

    def find_by_product(self, product_id: str) -> LineItem | None:
        with self._lock:
            return self._items.get(product_id)

    def find_by_inventory(self, inventory_id: str) -> LineItem | None:
        with self._lock:
            return next((item for item in self._items.values() if item.inventory_id == inventory_id), None)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def merge(self, result: LookupResult, *, barcode: str | None = None) -> LineItem:
        product = result.product
        inventory = result.inventory or InventorySnapshot()
        with self._lock:
            existing = self._items.get(product.id)
            if existing is None:
                current_stock = _stock(inventory.current_quantity)
                item = LineItem(
                    id=next(self._ids),
                    product_id=product.id,
                    sku=product.sku,
                    product_name=product.name,
                    quantity=1 if self.mode is MergeMode.INCREMENT else current_stock,
                    current_stock=current_stock,
                    previous_quantity=_stock(inventory.previous_quantity),
                    inventory_id=inventory.id,
                    qty_per_pack=inventory.qty_per_pack,
                    total_packs=inventory.total_packs,
                    barcode=barcode or product.sku,
                )
                action = "insert"
            else:
                item = replace(
                    existing,
                    sku=product.sku,
                    product_name=product.name,
                    quantity=existing.quantity + 1 if self.mode is MergeMode.INCREMENT else existing.quantity,
                    **self._stock_fields(existing, result.inventory),
                )
                action = "merge"
            # Re-assigning an existing key keeps its insertion position.
            self._items[product.id] = item
            change = self._bump(action, (item.id,))
        self._notify(change)
        logger.debug("line_item_merged", extra={"action": action, "product_id": product.id, "item_id": item.id})
        return item

    def replace_stock(self, item_id: int, inventory: InventorySnapshot | None) -> LineItem | None:
        """Overwrite server-derived stock fields on a row; quantity is left alone."""
        with self._lock:
            existing = self.get(item_id)
            if existing is None:
                return None
            item = replace(existing, **self._stock_fields(existing, inventory))
            self._items[existing.product_id] = item
            change = self._bump("refresh", (item.id,))
        self._notify(change)
        return item

    def apply_edits(self, edits: Iterable[DraftEdit | Mapping[str, Any]]) -> EditReport:
        applied: list[int] = []
        dropped: list[int] = []
        issues: list[ValidationIssue] = []
        with self._lock:
            for raw in edits:
                edit = DraftEdit.coerce(raw)
                existing = self.get(edit.id)
                if existing is None:
                    # The row was removed after the draft was issued.
                    dropped.append(edit.id)
                    continue
                if edit.field not in EDITABLE_FIELDS:
                    issues.append(
                        ValidationIssue(
                            row_index=edit.id,
                            field=edit.field,
                            reason=f"{edit.field} is not editable",
                            code="FIELD_NOT_EDITABLE",
                        )
                    )
                    continue
                try:
                    quantity = parse_quantity(edit.value)
                except ValueError as exc:
                    issues.append(
                        ValidationIssue(
                            row_index=edit.id,
                            field="quantity",
                            reason=f"{exc} (got {edit.value!r})",
                            code="INVALID_QUANTITY",
                        )
                    )
                    continue
                self._items[existing.product_id] = replace(existing, quantity=quantity)
                applied.append(edit.id)
            change = self._bump("edit", tuple(applied)) if applied else None
        if change is not None:
            self._notify(change)
        if issues:
            logger.info("line_item_edits_rejected", extra={"count": len(issues)})
        return EditReport(applied=tuple(applied), dropped=tuple(dropped), issues=tuple(issues))

    def remove(self, item_id: int) -> bool:
        with self._lock:
            existing = self.get(item_id)
            if existing is None:
                return False
            del self._items[existing.product_id]
            change = self._bump("remove", (item_id,))
        self._notify(change)
        return True

    def settle(self, sent: Iterable[LineItem]) -> tuple[int, ...]:
        """Consume rows that were committed from the given snapshots.

        A row whose quantity still matches its snapshot is removed. In increment mode a
        row that grew while the commit was in flight keeps only the added quantity.
        Rows edited to anything else are left for the next commit. Returns removed ids.
        """
        removed: list[int] = []
        touched: list[int] = []
        with self._lock:
            for snapshot in sent:
                current = self.get(snapshot.id)
                if current is None:
                    continue
                if current.quantity == snapshot.quantity:
                    del self._items[current.product_id]
                    removed.append(current.id)
                elif self.mode is MergeMode.INCREMENT and current.quantity > snapshot.quantity:
                    self._items[current.product_id] = replace(current, quantity=current.quantity - snapshot.quantity)
                else:
                    continue
                touched.append(current.id)
            change = self._bump("settle", tuple(touched)) if touched else None
        if change is not None:
            self._notify(change)
        if len(touched) > len(removed):
            logger.info("line_items_kept_after_commit", extra={"count": len(touched) - len(removed)})
        return tuple(removed)

    def clear(self) -> None:
        with self._lock:
            if not self._items:
                return
            removed = tuple(item.id for item in self._items.values())
            self._items.clear()
            change = self._bump("clear", removed)
        self._notify(change)

    @staticmethod
    def _stock_fields(existing: LineItem, inventory: InventorySnapshot | None) -> dict[str, Any]:
        if inventory is None:
            return {}
        return {
            "current_stock": _stock(inventory.current_quantity),
            "previous_quantity": _stock(inventory.previous_quantity),
            "inventory_id": inventory.id or existing.inventory_id,
            "qty_per_pack": inventory.qty_per_pack,
            "total_packs": inventory.total_packs,
        }

    def _bump(self, action: str, item_ids: tuple[int, ...]) -> StoreChange:
        self.version += 1
        return StoreChange(version=self.version, action=action, item_ids=item_ids)

    def _notify(self, change: StoreChange) -> None:
        for listener in list(self._listeners):
            # The mutation is already applied; every listener still gets the change.
            try:
                listener(change)
            except Exception:
                logger.exception(
                    "store_listener_failure",
                    extra={"version": change.version, "action": change.action},
                )
