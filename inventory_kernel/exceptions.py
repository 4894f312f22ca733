"""
Typed Exception Hierarchy for the Inventory Kernel.

Every failure a caller can act on has its own exception class. Each class
carries a machine-readable ``code`` class attribute, structured attributes
describing the failure, and a ``retryable`` flag telling the caller whether
re-invoking the same operation may succeed.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- OrderError
    |   +-- OrderNotFoundError
    |   +-- OrderNotReceivableError
    |   +-- OrderNotShippableError
    |   +-- OrderNotPendingApprovalError
    |   +-- InvalidOrderError
    |
    +-- ProductError
    |   +-- ProductNotFoundError
    |   +-- DuplicateSkuError
    |
    +-- PartyError
    |   +-- PartyNotFoundError
    |   +-- DuplicatePartyCodeError
    |   +-- PartyInactiveError
    |
    +-- MovementError
    |   +-- InvalidQuantityError
    |   +-- InvalidCostError
    |   +-- InsufficientStockError
    |
    +-- ConcurrencyError                (retryable)
    |   +-- ConcurrencyConflictError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- PersistenceError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                        | When Raised
-------------|-----------------------------|--------------------------------------
Order        | ORDER_NOT_FOUND             | Order ID doesn't exist
             | ORDER_NOT_RECEIVABLE        | Receive on a non-pending purchase order
             | ORDER_NOT_SHIPPABLE         | Ship on a sales order not awaiting shipment
             | ORDER_NOT_PENDING_APPROVAL  | Approve on an already approved order
             | INVALID_ORDER               | Empty order, too many lines, bad price
-------------|-----------------------------|--------------------------------------
Product      | PRODUCT_NOT_FOUND           | Line references an unknown product
             | DUPLICATE_SKU               | SKU already registered
-------------|-----------------------------|--------------------------------------
Party        | PARTY_NOT_FOUND             | Unknown customer or supplier
             | DUPLICATE_PARTY_CODE        | Code already used by that party type
             | PARTY_INACTIVE              | Order entry against a deactivated party
-------------|-----------------------------|--------------------------------------
Movement     | INVALID_QUANTITY            | Quantity <= 0
             | INVALID_COST                | Negative unit cost
             | INSUFFICIENT_STOCK          | Shipment exceeds on-hand stock
-------------|-----------------------------|--------------------------------------
Concurrency  | CONCURRENCY_CONFLICT        | Retries exhausted on a write
-------------|-----------------------------|--------------------------------------
Immutability | IMMUTABILITY_VIOLATION      | Update/delete of a ledger row
-------------|-----------------------------|--------------------------------------
Persistence  | PERSISTENCE_ERROR           | Unexpected database failure

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        service.ship_order(order_id, actor_id)
    except InsufficientStockError as e:
        notify(f"{e.product_name}: short by {e.shortfall}")
    except ConcurrencyConflictError:
        schedule_retry()

Catch by type, never by message. ``ConcurrencyError`` subclasses are the only
ones with ``retryable = True``.
"""

from decimal import Decimal


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses define a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"
    retryable: bool = False


# Order-related exceptions


class OrderError(InventoryKernelError):
    """Base exception for order-related errors."""

    code: str = "ORDER_ERROR"


class OrderNotFoundError(OrderError):
    """Order with given ID was not found."""

    code: str = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str, order_kind: str = "order"):
        self.order_id = order_id
        self.order_kind = order_kind
        super().__init__(f"{order_kind} not found: {order_id}")


class _OrderStatusError(OrderError):
    """Order is not in the status the requested action needs."""

    action: str = ""

    def __init__(self, order_number: str, status: str):
        self.order_number = order_number
        self.status = status
        super().__init__(
            f"Cannot {self.action} order {order_number}: status is '{status}'"
        )


class OrderNotReceivableError(_OrderStatusError):
    """Purchase order is not pending (already received)."""

    code: str = "ORDER_NOT_RECEIVABLE"
    action = "receive"


class OrderNotShippableError(_OrderStatusError):
    """Sales order is not awaiting shipment."""

    code: str = "ORDER_NOT_SHIPPABLE"
    action = "ship"


class OrderNotPendingApprovalError(_OrderStatusError):
    """Sales order is not awaiting approval."""

    code: str = "ORDER_NOT_PENDING_APPROVAL"
    action = "approve"


class InvalidOrderError(OrderError):
    """Order contents are invalid (empty, too many lines, bad price)."""

    code: str = "INVALID_ORDER"

    def __init__(self, reason: str, order_number: str | None = None):
        self.reason = reason
        self.order_number = order_number
        prefix = f"Order {order_number}: " if order_number else "Invalid order: "
        super().__init__(prefix + reason)


# Product-related exceptions


class ProductError(InventoryKernelError):
    """Base exception for product-related errors."""

    code: str = "PRODUCT_ERROR"


class ProductNotFoundError(ProductError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str, related_doc: str | None = None):
        self.product_id = product_id
        self.related_doc = related_doc
        suffix = f" (referenced by {related_doc})" if related_doc else ""
        super().__init__(f"Product not found: {product_id}{suffix}")


class DuplicateSkuError(ProductError):
    """A product with this SKU already exists."""

    code: str = "DUPLICATE_SKU"

    def __init__(self, sku: str):
        self.sku = sku
        super().__init__(f"SKU already exists: {sku}")


# Party-related exceptions


class PartyError(InventoryKernelError):
    """Base exception for customer and supplier errors."""

    code: str = "PARTY_ERROR"


class PartyNotFoundError(PartyError):
    """No customer or supplier with the given id (or code)."""

    code: str = "PARTY_NOT_FOUND"

    def __init__(self, party_ref: str, party_type: str = "party"):
        self.party_ref = party_ref
        self.party_type = party_type
        super().__init__(f"{party_type} not found: {party_ref}")


class DuplicatePartyCodeError(PartyError):
    """The code is already used by another party of the same type."""

    code: str = "DUPLICATE_PARTY_CODE"

    def __init__(self, party_code: str, party_type: str):
        self.party_code = party_code
        self.party_type = party_type
        super().__init__(f"{party_type} code already exists: {party_code}")


class PartyInactiveError(PartyError):
    """Orders cannot be entered against a deactivated party."""

    code: str = "PARTY_INACTIVE"

    def __init__(self, party_code: str, party_type: str):
        self.party_code = party_code
        self.party_type = party_type
        super().__init__(f"{party_type} {party_code} is inactive")


# Movement-related exceptions


class MovementError(InventoryKernelError):
    """Base exception for stock movement errors."""

    code: str = "MOVEMENT_ERROR"


class InvalidQuantityError(MovementError):
    """Line quantity is not a positive integer."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: object, product_id: str | None = None):
        self.quantity = quantity
        self.product_id = product_id
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")


class InvalidCostError(MovementError):
    """Receipt unit cost is negative."""

    code: str = "INVALID_COST"

    def __init__(self, unit_cost: Decimal, product_id: str | None = None):
        self.unit_cost = unit_cost
        self.product_id = product_id
        super().__init__(f"Unit cost must be >= 0, got {unit_cost}")


class InsufficientStockError(MovementError):
    """Shipment quantity exceeds on-hand stock. Never clamped."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        product_id: str,
        requested: int,
        available: int,
        product_name: str | None = None,
    ):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        self.shortfall = requested - available
        super().__init__(
            f"Insufficient stock for {product_name or product_id}: "
            f"requested {requested}, available {available}"
        )


# Concurrency-related exceptions


class ConcurrencyError(InventoryKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"
    retryable: bool = True


class ConcurrencyConflictError(ConcurrencyError):
    """The commit kept conflicting with concurrent writers until attempts ran out."""

    code: str = "CONCURRENCY_CONFLICT"

    def __init__(self, operation: str, entity_id: str, attempts: int):
        self.operation = operation
        self.entity_id = entity_id
        self.attempts = attempts
        super().__init__(
            f"{operation} on {entity_id} conflicted with concurrent writers "
            f"after {attempts} attempts"
        )


# Immutability-related exceptions


class ImmutabilityError(InventoryKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Inventory and cost log entries are immutable from creation. Sales order
    lines are immutable once their cost at sale is stamped.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Persistence


class PersistenceError(InventoryKernelError):
    """Unexpected database failure while running an operation."""

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")
