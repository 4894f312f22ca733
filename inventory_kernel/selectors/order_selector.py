"""
OrderSelector -- read access to purchase and sales orders.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from inventory_kernel.domain.dtos import PurchaseOrderInfo, SalesOrderInfo
from inventory_kernel.domain.order_lifecycle import PurchaseOrderStatus, SalesOrderStatus
from inventory_kernel.models.order import PurchaseOrderModel, SalesOrderModel
from inventory_kernel.selectors.base import BaseSelector


class OrderSelector(BaseSelector):
    """Order lookups and status queues (newest order first)."""

    def get_purchase_order(self, order_id: UUID) -> PurchaseOrderInfo | None:
        model = self.session.get(PurchaseOrderModel, order_id)
        return PurchaseOrderInfo.from_model(model) if model is not None else None

    def get_sales_order(self, order_id: UUID) -> SalesOrderInfo | None:
        model = self.session.get(SalesOrderModel, order_id)
        return SalesOrderInfo.from_model(model) if model is not None else None

    def find_by_number(self, order_number: str) -> PurchaseOrderInfo | SalesOrderInfo | None:
        po = self.session.scalars(
            select(PurchaseOrderModel).where(PurchaseOrderModel.order_number == order_number)
        ).first()
        if po is not None:
            return PurchaseOrderInfo.from_model(po)
        so = self.session.scalars(
            select(SalesOrderModel).where(SalesOrderModel.order_number == order_number)
        ).first()
        return SalesOrderInfo.from_model(so) if so is not None else None

    def purchase_orders(
        self, status: PurchaseOrderStatus | None = None
    ) -> tuple[PurchaseOrderInfo, ...]:
        stmt = select(PurchaseOrderModel)
        if status is not None:
            stmt = stmt.where(PurchaseOrderModel.status == PurchaseOrderStatus(status).value)
        stmt = stmt.order_by(
            PurchaseOrderModel.order_date.desc(), PurchaseOrderModel.order_number.desc()
        )
        return tuple(PurchaseOrderInfo.from_model(m) for m in self.session.scalars(stmt))

    def sales_orders(
        self, status: SalesOrderStatus | None = None
    ) -> tuple[SalesOrderInfo, ...]:
        stmt = select(SalesOrderModel)
        if status is not None:
            stmt = stmt.where(SalesOrderModel.status == SalesOrderStatus(status).value)
        stmt = stmt.order_by(
            SalesOrderModel.order_date.desc(), SalesOrderModel.order_number.desc()
        )
        return tuple(SalesOrderInfo.from_model(m) for m in self.session.scalars(stmt))
