from .batch_submitter import BatchSubmitter, CommitOutcome, LineRejection
from .config import ClientConfig, ConfigError, load_config
from .engine import LookupOutcome, ReconciliationEngine
from .exceptions import (
    AlreadySubmittingError,
    ApiError,
    CommitError,
    EmptyBatchError,
    InvalidQuantityError,
    LookupFailedError,
    LookupNotFoundError,
    MissingContextError,
    MissingSelectionError,
    NoValidLinesError,
    NotFoundError,
    ReconciliationError,
    TransportError,
    ValidationError,
)
from .http_client import HttpClient, TraceContext
from .line_items import DraftEdit, EditReport, LineItem, LineItemStore, StoreChange
from .models import (
    CatalogEntryRequest,
    CommitAck,
    CommitContext,
    CommitLine,
    InventorySnapshot,
    LookupResult,
    MovementType,
    Product,
    TransactionType,
    Warehouse,
)
from .quantity_validation import ClientValidationError, ValidationIssue, parse_quantity
from .session import ApiSession
from .session_state import SessionState, session_action_availability
from .workflows import (
    ORDER_WORKFLOW,
    QUOTE_WORKFLOW,
    RECEIVING_WORKFLOW,
    STOCK_CORRECTION_WORKFLOW,
    CommitStrategy,
    MergeMode,
    Workflow,
    get_workflow,
)

__all__ = [
    "AlreadySubmittingError",
    "ApiError",
    "ApiSession",
    "BatchSubmitter",
    "CatalogEntryRequest",
    "ClientConfig",
    "ClientValidationError",
    "CommitAck",
    "CommitContext",
    "CommitError",
    "CommitLine",
    "CommitOutcome",
    "CommitStrategy",
    "ConfigError",
    "DraftEdit",
    "EditReport",
    "EmptyBatchError",
    "HttpClient",
    "InvalidQuantityError",
    "InventorySnapshot",
    "LineItem",
    "LineItemStore",
    "LineRejection",
    "LookupFailedError",
    "LookupNotFoundError",
    "LookupOutcome",
    "LookupResult",
    "MergeMode",
    "MissingContextError",
    "MissingSelectionError",
    "MovementType",
    "NoValidLinesError",
    "NotFoundError",
    "ORDER_WORKFLOW",
    "Product",
    "QUOTE_WORKFLOW",
    "RECEIVING_WORKFLOW",
    "ReconciliationEngine",
    "ReconciliationError",
    "STOCK_CORRECTION_WORKFLOW",
    "SessionState",
    "StoreChange",
    "TraceContext",
    "TransactionType",
    "TransportError",
    "ValidationError",
    "ValidationIssue",
    "Warehouse",
    "Workflow",
    "get_workflow",
    "load_config",
    "parse_quantity",
    "session_action_availability",
]
