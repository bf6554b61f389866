from .catalog_client import CatalogClient
from .inventory_client import InventoryClient, default_warehouse_id

__all__ = [
    "CatalogClient",
    "InventoryClient",
    "default_warehouse_id",
]
