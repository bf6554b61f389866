from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import TransactionType


class MergeMode(str, Enum):
    INCREMENT = "increment"
    ABSOLUTE = "absolute"


class CommitStrategy(str, Enum):
    CLEAR = "clear"
    REFRESH_IN_PLACE = "refresh_in_place"


@dataclass(frozen=True)
class Workflow:
    """How one screen uses the shared engine.

    ``required_context`` names the ``CommitContext`` fields a commit must carry;
    a missing one is a ``MissingContextError``, never a silent default.
    """

    name: str
    mode: MergeMode
    strategy: CommitStrategy
    transaction_type: TransactionType
    required_context: tuple[str, ...] = ("warehouse_id",)

    def accepts_quantity(self, quantity: int) -> bool:
        # Zero is a valid absolute target (zeroing stock) but an empty increment.
        if self.mode is MergeMode.ABSOLUTE:
            return quantity >= 0
        return quantity > 0


ORDER_WORKFLOW = Workflow(
    name="order",
    mode=MergeMode.INCREMENT,
    strategy=CommitStrategy.CLEAR,
    transaction_type=TransactionType.OUT,
)

RECEIVING_WORKFLOW = Workflow(
    name="receiving",
    mode=MergeMode.INCREMENT,
    strategy=CommitStrategy.CLEAR,
    transaction_type=TransactionType.IN,
)

QUOTE_WORKFLOW = Workflow(
    name="quote",
    mode=MergeMode.INCREMENT,
    strategy=CommitStrategy.CLEAR,
    transaction_type=TransactionType.QUOTE,
    required_context=("account_id",),
)

STOCK_CORRECTION_WORKFLOW = Workflow(
    name="stock_correction",
    mode=MergeMode.ABSOLUTE,
    strategy=CommitStrategy.REFRESH_IN_PLACE,
    transaction_type=TransactionType.ADJUSTMENT,
)

WORKFLOWS = {
    workflow.name: workflow
    for workflow in (ORDER_WORKFLOW, RECEIVING_WORKFLOW, QUOTE_WORKFLOW, STOCK_CORRECTION_WORKFLOW)
}


def get_workflow(name: str) -> Workflow:
    try:
        return WORKFLOWS[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown workflow '{name}'") from exc
