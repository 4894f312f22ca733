"""
ORM-Level Immutability Enforcement for the inventory ledgers.

===============================================================================
WHY THIS EXISTS
===============================================================================

The stock and cost ledgers are the audit trail of every movement.  Stock can
be re-derived by replaying inventory_logs, and margin reports rely on the
cost a sales line was stamped with at shipment.  Neither holds if a row can
be edited after the fact.  Corrections are new movements, never edits.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events and check the rules:

    session.flush()
         |
         v
    [before_update event] --> _check_*_immutability() --> ImmutabilityViolationError
         |                                                        ^
         v                                                        |
    [before_delete event] --> _check_*_delete() -----------------+
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity                  | When Immutable                     | Why
------------------------|------------------------------------|----------------------------
InventoryLogModel       | ALWAYS (from creation)             | Replay reproduces stock
CostLogModel            | ALWAYS (from creation)             | Cost history is evidence
SalesOrderLineModel     | Once cost_at_sale is stamped       | COGS of a completed sale
PurchaseOrderLineModel  | Once the parent order is received  | Receipt already in stock

Bulk ``UPDATE``/``DELETE`` statements issued through Core bypass these
listeners.  Only test teardown does that.
"""

from sqlalchemy import event
from sqlalchemy.orm.attributes import get_history

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(entity_type: str, target, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_inventory_log_immutability(mapper, connection, target):
    """Inventory log entries are append-only."""
    _block(
        "InventoryLogEntry", target, "UPDATE",
        "Inventory log entries are immutable and cannot be modified",
    )


def _check_inventory_log_delete(mapper, connection, target):
    _block(
        "InventoryLogEntry", target, "DELETE",
        "Inventory log entries cannot be deleted",
    )


def _check_cost_log_immutability(mapper, connection, target):
    """Cost log entries are append-only."""
    _block(
        "CostLogEntry", target, "UPDATE",
        "Cost log entries are immutable and cannot be modified",
    )


def _check_cost_log_delete(mapper, connection, target):
    _block(
        "CostLogEntry", target, "DELETE",
        "Cost log entries cannot be deleted",
    )


def _was_stamped(target) -> bool:
    """True if cost_at_sale held a value before the pending change."""
    hist = get_history(target, "cost_at_sale")
    return any(v is not None for v in (*hist.deleted, *hist.unchanged))


def _check_sales_line_immutability(mapper, connection, target):
    """
    Sales lines may change until shipment stamps cost_at_sale.

    The stamping UPDATE itself is allowed: the committed value is still None.
    """
    if _was_stamped(target):
        _block(
            "SalesOrderLine", target, "UPDATE",
            "Sales order lines cannot be modified after shipment",
        )


def _check_sales_line_delete(mapper, connection, target):
    if _was_stamped(target):
        _block(
            "SalesOrderLine", target, "DELETE",
            "Sales order lines cannot be deleted after shipment",
        )


def _purchase_order_received(target) -> bool:
    from inventory_kernel.domain.order_lifecycle import PurchaseOrderStatus

    order = target.order
    return order is not None and order.status == PurchaseOrderStatus.RECEIVED.value


def _check_purchase_line_immutability(mapper, connection, target):
    if _purchase_order_received(target):
        _block(
            "PurchaseOrderLine", target, "UPDATE",
            "Purchase order lines cannot be modified after receipt",
        )


def _check_purchase_line_delete(mapper, connection, target):
    if _purchase_order_received(target):
        _block(
            "PurchaseOrderLine", target, "DELETE",
            "Purchase order lines cannot be deleted after receipt",
        )


def _listeners():
    from inventory_kernel.models.ledger import CostLogModel, InventoryLogModel
    from inventory_kernel.models.order import (
        PurchaseOrderLineModel,
        SalesOrderLineModel,
    )

    return (
        (InventoryLogModel, "before_update", _check_inventory_log_immutability),
        (InventoryLogModel, "before_delete", _check_inventory_log_delete),
        (CostLogModel, "before_update", _check_cost_log_immutability),
        (CostLogModel, "before_delete", _check_cost_log_delete),
        (SalesOrderLineModel, "before_update", _check_sales_line_immutability),
        (SalesOrderLineModel, "before_delete", _check_sales_line_delete),
        (PurchaseOrderLineModel, "before_update", _check_purchase_line_immutability),
        (PurchaseOrderLineModel, "before_delete", _check_purchase_line_delete),
    )


def register_immutability_listeners() -> None:
    """Register all immutability enforcement event listeners (idempotent)."""
    registered = 0
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)
            registered += 1
    if registered:
        logger.debug("immutability_listeners_registered", extra={"count": registered})


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners() -> None:
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    for target, event_name, listener_fn in _listeners():
        _safe_remove_listener(target, event_name, listener_fn)
