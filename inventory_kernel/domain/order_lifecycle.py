"""
Order lifecycles.

State machines for purchase orders (receipt) and sales orders (approval,
shipment).  Both are monotonic: there is no un-receive and no un-ship.
"""

from enum import Enum

from inventory_kernel.domain.workflow import Guard, Transition, Workflow
from inventory_kernel.logging_config import get_logger

logger = get_logger("domain.order_lifecycle")


class PurchaseOrderStatus(str, Enum):
    """Purchase order lifecycle states."""

    PENDING = "pending"
    RECEIVED = "received"


class SalesOrderStatus(str, Enum):
    """Sales order lifecycle states."""

    PENDING_APPROVAL = "pending_approval"
    PENDING_SHIPMENT = "pending_shipment"
    COMPLETED = "completed"


class OrderAction(str, Enum):
    RECEIVE = "receive"
    APPROVE = "approve"
    SHIP = "ship"


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

PRODUCTS_EXIST = Guard(
    name="products_exist",
    description="Every line references an existing product",
)

STOCK_AVAILABLE = Guard(
    name="stock_available",
    description="Every line quantity is covered by on-hand stock",
)


# -----------------------------------------------------------------------------
# Purchase Order Workflow
# -----------------------------------------------------------------------------

PURCHASE_ORDER_WORKFLOW = Workflow(
    name="purchase_order",
    description="Goods receipt against a supplier purchase order",
    initial_state=PurchaseOrderStatus.PENDING.value,
    states=tuple(s.value for s in PurchaseOrderStatus),
    transitions=(
        Transition(
            PurchaseOrderStatus.PENDING.value,
            PurchaseOrderStatus.RECEIVED.value,
            action=OrderAction.RECEIVE.value,
            guard=PRODUCTS_EXIST,
            stock_effect="in",
        ),
    ),
    terminal_states=(PurchaseOrderStatus.RECEIVED.value,),
)

logger.info(
    "purchase_order_workflow_registered",
    extra={
        "workflow_name": PURCHASE_ORDER_WORKFLOW.name,
        "state_count": len(PURCHASE_ORDER_WORKFLOW.states),
        "transition_count": len(PURCHASE_ORDER_WORKFLOW.transitions),
    },
)


# -----------------------------------------------------------------------------
# Sales Order Workflow
# -----------------------------------------------------------------------------

SALES_ORDER_WORKFLOW = Workflow(
    name="sales_order",
    description="Customer order approval and shipment",
    initial_state=SalesOrderStatus.PENDING_APPROVAL.value,
    states=tuple(s.value for s in SalesOrderStatus),
    transitions=(
        Transition(
            SalesOrderStatus.PENDING_APPROVAL.value,
            SalesOrderStatus.PENDING_SHIPMENT.value,
            action=OrderAction.APPROVE.value,
        ),
        Transition(
            SalesOrderStatus.PENDING_SHIPMENT.value,
            SalesOrderStatus.COMPLETED.value,
            action=OrderAction.SHIP.value,
            guard=STOCK_AVAILABLE,
            stock_effect="out",
        ),
    ),
    terminal_states=(SalesOrderStatus.COMPLETED.value,),
)

logger.info(
    "sales_order_workflow_registered",
    extra={
        "workflow_name": SALES_ORDER_WORKFLOW.name,
        "state_count": len(SALES_ORDER_WORKFLOW.states),
        "transition_count": len(SALES_ORDER_WORKFLOW.transitions),
    },
)
