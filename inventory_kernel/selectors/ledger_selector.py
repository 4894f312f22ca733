"""
LedgerSelector -- read access to the stock and cost ledgers.

History is returned newest first: by timestamp, then by line number within
one document.  ``reconcile_stock`` replays a product's stock ledger and
compares the result with the stock column.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select

from inventory_engines.costing import reconstruct_stock
from inventory_kernel.domain.dtos import (
    CostLogEntry,
    InventoryLogEntry,
    StockReconciliation,
)
from inventory_kernel.exceptions import ProductNotFoundError
from inventory_kernel.models.ledger import CostLogModel, InventoryLogModel
from inventory_kernel.models.product import ProductModel
from inventory_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector):
    """Stock-ledger and cost-ledger queries."""

    def inventory_log(
        self, product_id: UUID, limit: int | None = None
    ) -> tuple[InventoryLogEntry, ...]:
        stmt = (
            select(InventoryLogModel)
            .where(InventoryLogModel.product_id == product_id)
            .order_by(InventoryLogModel.timestamp.desc(), InventoryLogModel.line_no.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return tuple(InventoryLogEntry.from_model(m) for m in self.session.scalars(stmt))

    def cost_log(
        self, product_id: UUID, limit: int | None = None
    ) -> tuple[CostLogEntry, ...]:
        stmt = (
            select(CostLogModel)
            .where(CostLogModel.product_id == product_id)
            .order_by(CostLogModel.timestamp.desc(), CostLogModel.line_no.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return tuple(CostLogEntry.from_model(m) for m in self.session.scalars(stmt))

    def entries_for_document(self, related_doc: str) -> tuple[InventoryLogEntry, ...]:
        """Stock-ledger rows written by one order, in line order."""
        stmt = (
            select(InventoryLogModel)
            .where(InventoryLogModel.related_doc == related_doc)
            .order_by(InventoryLogModel.line_no)
        )
        return tuple(InventoryLogEntry.from_model(m) for m in self.session.scalars(stmt))

    def cost_entries_for_document(self, related_doc: str) -> tuple[CostLogEntry, ...]:
        stmt = (
            select(CostLogModel)
            .where(CostLogModel.related_doc == related_doc)
            .order_by(CostLogModel.line_no)
        )
        return tuple(CostLogEntry.from_model(m) for m in self.session.scalars(stmt))

    def ledger_stock(self, product_id: UUID) -> int:
        """Sum of signed changes for a product (0 when it has no entries)."""
        total = self.session.scalar(
            select(func.coalesce(func.sum(InventoryLogModel.change), 0))
            .where(InventoryLogModel.product_id == product_id)
        )
        return int(total or 0)

    def reconcile_stock(self, product_id: UUID) -> StockReconciliation:
        """
        Replay the stock ledger of one product against its stock column.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        product = self.session.get(ProductModel, product_id)
        if product is None:
            raise ProductNotFoundError(str(product_id))
        changes = self.session.scalars(
            select(InventoryLogModel.change)
            .where(InventoryLogModel.product_id == product_id)
        ).all()
        return StockReconciliation(
            product_id=product_id,
            recorded_stock=product.stock,
            ledger_stock=reconstruct_stock(changes),
            entry_count=len(changes),
        )

    def reconcile_all(self) -> tuple[StockReconciliation, ...]:
        """Reconciliation for every product, ordered by SKU."""
        product_ids = self.session.scalars(
            select(ProductModel.id).order_by(ProductModel.sku)
        ).all()
        return tuple(self.reconcile_stock(pid) for pid in product_ids)
