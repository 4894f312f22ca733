"""
MovementCoordinator -- applies a whole order to stock as one unit.

Responsibility:
    Receive a purchase order or ship a sales order: check the order
    lifecycle, run every line through the moving-average costing engine in
    line order, and stage the product updates, the ledger appends and the
    order status change in the caller's session.

Architecture position:
    Kernel > Services -- imperative shell over the pure costing engine.
    Flush-only: the caller (TransactionRunner) commits or rolls back.

Invariants enforced:
    - All-or-nothing: any error aborts before the caller commits, so no
      product, ledger or order row from the movement is persisted.
    - Lines are applied in line order against identity-mapped products, so
      two lines for the same product compound.
    - Every product change is paired with an inventory log entry carrying
      the resulting stock; a cost log entry is added only when the rounded
      average moves.
    - The status guard is evaluated inside the same transaction as the
      stock change; the order's version counter makes a concurrent
      transition of the same order fail at commit.
    - Shipments stamp cost_at_sale on each line with the average at the
      moment of shipment.

Failure modes:
    - OrderNotFoundError, OrderNotReceivableError, OrderNotShippableError.
    - ProductNotFoundError for a line whose product no longer exists.
    - InvalidQuantityError / InvalidCostError / InsufficientStockError from
      the costing engine.
    - StaleDataError at flush when a concurrent writer got there first
      (translated into a retry by TransactionRunner).
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from inventory_engines.costing import (
    MovingAverageCostEngine,
    ReceiptLine,
    ShipmentLine,
    StockPosition,
)
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.dtos import MovementLine, MovementResult, MovementType
from inventory_kernel.domain.order_lifecycle import (
    PURCHASE_ORDER_WORKFLOW,
    SALES_ORDER_WORKFLOW,
    OrderAction,
)
from inventory_kernel.exceptions import (
    InvalidOrderError,
    OrderNotFoundError,
    OrderNotReceivableError,
    OrderNotShippableError,
    ProductNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.ledger import CostLogModel, InventoryLogModel
from inventory_kernel.models.order import PurchaseOrderModel, SalesOrderModel
from inventory_kernel.models.product import ProductModel
from inventory_kernel.services.base import BaseService

logger = get_logger("services.movement_coordinator")


class MovementCoordinator(BaseService):
    """Stages receipts and shipments. Never commits."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        cost_engine: MovingAverageCostEngine | None = None,
    ):
        super().__init__(session, clock)
        self._engine = cost_engine or MovingAverageCostEngine()

    def _product_for(self, product_id: UUID, order_number: str) -> ProductModel:
        product = self.session.get(ProductModel, product_id)
        if product is None:
            logger.warning("movement_product_missing", extra={
                "product_id": str(product_id),
                "order_number": order_number,
            })
            raise ProductNotFoundError(str(product_id), related_doc=order_number)
        return product

    # ------------------------------------------------------------------
    # Receipt
    # ------------------------------------------------------------------

    def receive(self, order_id: UUID, actor_id: UUID) -> MovementResult:
        """
        Receive every line of a pending purchase order into stock.

        Preconditions:
            Order status is ``pending``.
        Postconditions (after the caller commits):
            Each product's stock rose by the line quantities and its average
            cost is the weighted average of the old position and the
            receipts; one ``in`` log entry per line; one cost log entry per
            line that moved the average; order status ``received`` with
            ``received_at`` set.

        Raises:
            OrderNotFoundError, OrderNotReceivableError, InvalidOrderError,
            ProductNotFoundError, InvalidQuantityError, InvalidCostError.
        """
        order = self.session.get(PurchaseOrderModel, order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id), "purchase order")

        transition = PURCHASE_ORDER_WORKFLOW.transition_for(
            order.status, OrderAction.RECEIVE.value
        )
        if transition is None:
            logger.info("receive_rejected_status", extra={
                "order_number": order.order_number,
                "status": order.status,
            })
            raise OrderNotReceivableError(order.order_number, order.status)
        if not order.lines:
            raise InvalidOrderError("order has no lines", order.order_number)

        timestamp = self.clock.now()
        movement_lines: list[MovementLine] = []
        cost_logs = 0

        for line in order.lines:
            product = self._product_for(line.product_id, order.order_number)
            position = StockPosition(
                product_id=product.id,
                stock=product.stock,
                average_cost=product.average_cost,
                product_name=product.name,
            )
            result = self._engine.apply_receipt(
                position, ReceiptLine(quantity=line.quantity, unit_cost=line.unit_cost)
            )

            product.stock = result.new_stock
            product.average_cost = result.new_average_cost
            product.last_cost = line.unit_cost
            product.updated_by_id = actor_id

            self.session.add(InventoryLogModel(
                product_id=product.id,
                product_name=product.name,
                movement_type=MovementType.IN.value,
                change=line.quantity,
                new_stock=result.new_stock,
                related_doc=order.order_number,
                line_no=line.line_no,
                timestamp=timestamp,
                actor_id=actor_id,
            ))
            if result.cost_changed:
                self.session.add(CostLogModel(
                    product_id=product.id,
                    product_name=product.name,
                    movement_type=MovementType.IN.value,
                    old_avg_cost=result.old_average_cost,
                    new_avg_cost=result.new_average_cost,
                    related_doc=order.order_number,
                    line_no=line.line_no,
                    timestamp=timestamp,
                    actor_id=actor_id,
                ))
                cost_logs += 1

            movement_lines.append(MovementLine(
                line_no=line.line_no,
                product_id=product.id,
                product_name=product.name,
                quantity=line.quantity,
                stock_before=position.stock,
                stock_after=result.new_stock,
                average_cost_before=result.old_average_cost,
                average_cost_after=result.new_average_cost,
            ))
            logger.info("receipt_line_applied", extra={
                "order_number": order.order_number,
                "line_no": line.line_no,
                "product_id": str(product.id),
                "quantity": line.quantity,
                "new_stock": result.new_stock,
                "new_average_cost": str(result.new_average_cost),
                "cost_changed": result.cost_changed,
            })

        order.status = transition.to_state
        order.received_at = timestamp
        order.received_by_id = actor_id
        order.updated_by_id = actor_id
        self.session.flush()

        return self._result(order.id, order.order_number, MovementType.IN,
                            order.status, timestamp, movement_lines, cost_logs)

    # ------------------------------------------------------------------
    # Shipment
    # ------------------------------------------------------------------

    def ship(self, order_id: UUID, actor_id: UUID) -> MovementResult:
        """
        Ship every line of an approved sales order out of stock.

        Preconditions:
            Order status is ``pending_shipment``.
        Postconditions (after the caller commits):
            Each product's stock fell by the line quantities, average cost
            unchanged; one ``out`` log entry per line with a negative
            change; each line stamped with ``cost_at_sale``; order status
            ``completed`` with ``shipped_at`` set.

        Raises:
            OrderNotFoundError, OrderNotShippableError, InvalidOrderError,
            ProductNotFoundError, InvalidQuantityError,
            InsufficientStockError (never clamped; nothing is written).
        """
        order = self.session.get(SalesOrderModel, order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id), "sales order")

        transition = SALES_ORDER_WORKFLOW.transition_for(order.status, OrderAction.SHIP.value)
        if transition is None:
            logger.info("ship_rejected_status", extra={
                "order_number": order.order_number,
                "status": order.status,
            })
            raise OrderNotShippableError(order.order_number, order.status)
        if not order.lines:
            raise InvalidOrderError("order has no lines", order.order_number)

        timestamp = self.clock.now()
        movement_lines: list[MovementLine] = []

        for line in order.lines:
            product = self._product_for(line.product_id, order.order_number)
            position = StockPosition(
                product_id=product.id,
                stock=product.stock,
                average_cost=product.average_cost,
                product_name=product.name,
            )
            result = self._engine.apply_shipment(position, ShipmentLine(quantity=line.quantity))

            product.stock = result.new_stock
            product.updated_by_id = actor_id
            line.cost_at_sale = result.cost_at_sale

            self.session.add(InventoryLogModel(
                product_id=product.id,
                product_name=product.name,
                movement_type=MovementType.OUT.value,
                change=-line.quantity,
                new_stock=result.new_stock,
                related_doc=order.order_number,
                line_no=line.line_no,
                timestamp=timestamp,
                actor_id=actor_id,
            ))

            movement_lines.append(MovementLine(
                line_no=line.line_no,
                product_id=product.id,
                product_name=product.name,
                quantity=line.quantity,
                stock_before=position.stock,
                stock_after=result.new_stock,
                average_cost_before=position.average_cost,
                average_cost_after=position.average_cost,
                cost_at_sale=result.cost_at_sale,
            ))
            logger.info("shipment_line_applied", extra={
                "order_number": order.order_number,
                "line_no": line.line_no,
                "product_id": str(product.id),
                "quantity": line.quantity,
                "new_stock": result.new_stock,
                "cost_at_sale": str(result.cost_at_sale),
            })

        order.status = transition.to_state
        order.shipped_at = timestamp
        order.shipped_by_id = actor_id
        order.updated_by_id = actor_id
        self.session.flush()

        return self._result(order.id, order.order_number, MovementType.OUT,
                            order.status, timestamp, movement_lines, 0)

    @staticmethod
    def _result(
        order_id: UUID,
        order_number: str,
        movement_type: MovementType,
        status: str,
        timestamp: datetime,
        lines: list[MovementLine],
        cost_logs: int,
    ) -> MovementResult:
        logger.info("movement_staged", extra={
            "order_number": order_number,
            "movement_type": movement_type.value,
            "line_count": len(lines),
            "cost_log_count": cost_logs,
        })
        return MovementResult(
            order_id=order_id,
            order_number=order_number,
            movement_type=movement_type,
            status=status,
            timestamp=timestamp,
            lines=tuple(lines),
            inventory_log_count=len(lines),
            cost_log_count=cost_logs,
        )
