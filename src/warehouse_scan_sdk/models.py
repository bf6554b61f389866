from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TransactionType(str, Enum):
    OUT = "Out"
    IN = "In"
    ADJUSTMENT = "Adjustment"
    QUOTE = "Quote"


class MovementType(str, Enum):
    INBOUND = "Inbound"
    OUTBOUND = "Outbound"
    ADJUSTMENT = "Adjustment"


class Product(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "Id"))
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "Name"))
    sku: str | None = Field(default=None, validation_alias=AliasChoices("sku", "ProductCode"))
    description: str | None = Field(default=None, validation_alias=AliasChoices("description", "Description"))


class InventorySnapshot(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "Id"))
    current_quantity: int | None = Field(
        default=None, validation_alias=AliasChoices("current_quantity", "Current_Quantity__c")
    )
    previous_quantity: int | None = Field(
        default=None, validation_alias=AliasChoices("previous_quantity", "Previous_Quantity__c")
    )
    qty_per_pack: int | None = Field(default=None, validation_alias=AliasChoices("qty_per_pack", "Qty_per_pack__c"))
    total_packs: int | None = Field(default=None, validation_alias=AliasChoices("total_packs", "Total_des_packs__c"))


class LookupResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    product: Product
    inventory: InventorySnapshot | None = None


class Warehouse(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "Id"))
    name: str = Field(validation_alias=AliasChoices("name", "Name"))
    location: str | None = Field(default=None, validation_alias=AliasChoices("location", "Location__c"))

    @property
    def label(self) -> str:
        return f"{self.name} ({self.location})" if self.location else self.name


class Account(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "Id"))
    name: str = Field(validation_alias=AliasChoices("name", "Name"))


class CatalogOption(BaseModel):
    """Category or supplier entry offered on the new-product form."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "Id"))
    name: str = Field(validation_alias=AliasChoices("name", "Name"))


class CommitLine(BaseModel):
    model_config = ConfigDict(extra="forbid")

    product_id: str
    quantity: int
    barcode: str | None = None
    inventory_id: str | None = None


class CommitContext(BaseModel):
    model_config = ConfigDict(extra="forbid")

    warehouse_id: str | None = None
    account_id: str | None = None
    transaction_type: TransactionType | None = None
    source_doc: str | None = None
    batch_id: str | None = None
    idempotency_key: str | None = None


class CommitRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    batch_id: str
    warehouse_id: str | None = None
    account_id: str | None = None
    transaction_type: TransactionType
    source_doc: str | None = None
    lines: list[CommitLine]


class CommitLineResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    product_id: str | None = None
    status: str | None = None
    code: str | None = None
    message: str | None = None

    @property
    def rejected(self) -> bool:
        return (self.status or "").upper() in {"ERROR", "FAILED", "REJECTED"}


class CommitAck(BaseModel):
    model_config = ConfigDict(extra="allow")

    batch_id: str | None = None
    processed: int | None = None
    message: str | None = None
    trace_id: str | None = None
    line_results: list[CommitLineResult] | None = None


class QuantityUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    transaction_id: str | None = None
    inventory_id: str
    new_quantity: int
    source_doc: str | None = None


class StockMovementRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    transaction_id: str | None = None
    product_id: str
    warehouse_id: str
    qty: int
    movement_type: MovementType


class CatalogEntryRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    sku: str | None = None
    name: str | None = None
    brand: str | None = None
    category_id: str | None = None
    uom: str | None = None
    size: str | None = None
    description: str | None = None
    warehouse_id: str | None = None
    supplier_id: str | None = None
    opening_qty: int = 0
    unit_price: Decimal = Decimal("0")
    qty_per_pack: int = 0
    source_doc: str | None = None


class CatalogEntryResponse(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId", "id"))
    inventory_id: str | None = Field(default=None, validation_alias=AliasChoices("inventory_id", "inventoryId"))
