"""ORM models. Importing this package registers every table on Base.metadata."""

from inventory_kernel.models.ledger import CostLogModel, InventoryLogModel
from inventory_kernel.models.order import (
    PurchaseOrderLineModel,
    PurchaseOrderModel,
    SalesOrderLineModel,
    SalesOrderModel,
)
from inventory_kernel.models.party import PartyModel
from inventory_kernel.models.product import ProductModel

__all__ = [
    "ProductModel",
    "PartyModel",
    "PurchaseOrderModel",
    "PurchaseOrderLineModel",
    "SalesOrderModel",
    "SalesOrderLineModel",
    "InventoryLogModel",
    "CostLogModel",
]
