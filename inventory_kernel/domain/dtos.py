"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable data structures that cross the service boundary: order-entry
    inputs (line specs), read-side records for products, orders and ledger
    entries, and the results of stock movements and reports.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``from_model()`` class methods are boundary converters, invoked only from
    the service and selector layers.

Invariants enforced:
    - Services and selectors return DTOs, never live ORM entities.
    - Line specs reject non-positive quantities and negative prices at
      construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping
from uuid import UUID

from inventory_kernel.exceptions import InvalidCostError, InvalidQuantityError

if TYPE_CHECKING:
    from inventory_kernel.models.ledger import CostLogModel, InventoryLogModel
    from inventory_kernel.models.order import (
        PurchaseOrderLineModel,
        PurchaseOrderModel,
        SalesOrderLineModel,
        SalesOrderModel,
    )
    from inventory_kernel.models.party import PartyModel
    from inventory_kernel.models.product import ProductModel


class MovementType(str, Enum):
    """Direction of a stock movement."""

    IN = "in"
    OUT = "out"


class PriceTier(str, Enum):
    """Customer price tiers carried on every product."""

    RETAIL = "retail"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class PartyType(str, Enum):
    """Who an order is entered against."""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"


def _check_quantity(quantity: int, product_id: UUID | None) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(quantity, str(product_id) if product_id else None)


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; every stored time is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


# =============================================================================
# Order-entry inputs
# =============================================================================


@dataclass(frozen=True)
class PurchaseLineSpec:
    """One requested line of a purchase order.

    ``unit_cost`` of None means "the product's last received unit cost"
    (zero for a product never received).
    """

    product_id: UUID
    quantity: int
    unit_cost: Decimal | None = None

    def __post_init__(self) -> None:
        _check_quantity(self.quantity, self.product_id)
        if self.unit_cost is not None and self.unit_cost < 0:
            raise InvalidCostError(self.unit_cost, str(self.product_id))


@dataclass(frozen=True)
class SalesLineSpec:
    """One requested line of a sales order.

    ``unit_price`` of None means "use the product's price for the order's
    price tier".
    """

    product_id: UUID
    quantity: int
    unit_price: Decimal | None = None

    def __post_init__(self) -> None:
        _check_quantity(self.quantity, self.product_id)
        if self.unit_price is not None and self.unit_price < 0:
            raise InvalidCostError(self.unit_price, str(self.product_id))


# =============================================================================
# Products
# =============================================================================


@dataclass(frozen=True)
class ProductInfo:
    """Read-side snapshot of a product."""

    id: UUID
    sku: str
    name: str
    stock: int
    average_cost: Decimal
    last_cost: Decimal | None
    low_stock_threshold: int
    prices: Mapping[str, Decimal]
    version: int
    brand: str | None = None
    variant: str | None = None
    description: str | None = None

    @property
    def inventory_value(self) -> Decimal:
        return self.average_cost * self.stock

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.low_stock_threshold

    def price_for(self, tier: PriceTier | str) -> Decimal | None:
        return self.prices.get(PriceTier(tier).value)

    @classmethod
    def from_model(cls, model: ProductModel) -> ProductInfo:
        return cls(
            id=model.id,
            sku=model.sku,
            name=model.name,
            stock=model.stock,
            average_cost=model.average_cost,
            last_cost=model.last_cost,
            low_stock_threshold=model.low_stock_threshold,
            prices=MappingProxyType(
                {k: Decimal(v) for k, v in (model.prices or {}).items()}
            ),
            version=model.version_id,
            brand=model.brand,
            variant=model.variant,
            description=model.description,
        )


# =============================================================================
# Parties
# =============================================================================


@dataclass(frozen=True)
class PartyInfo:
    """Read-side snapshot of a customer or supplier."""

    id: UUID
    party_code: str
    party_type: PartyType
    name: str
    is_active: bool
    price_tier: PriceTier | None = None

    @property
    def is_customer(self) -> bool:
        return self.party_type is PartyType.CUSTOMER

    @classmethod
    def from_model(cls, model: PartyModel) -> PartyInfo:
        return cls(
            id=model.id,
            party_code=model.party_code,
            party_type=PartyType(model.party_type),
            name=model.name,
            is_active=model.is_active,
            price_tier=PriceTier(model.price_tier) if model.price_tier else None,
        )


# =============================================================================
# Orders
# =============================================================================


@dataclass(frozen=True)
class PurchaseOrderLineInfo:
    line_no: int
    product_id: UUID
    product_name: str
    quantity: int
    unit_cost: Decimal

    @property
    def amount(self) -> Decimal:
        return self.unit_cost * self.quantity

    @classmethod
    def from_model(cls, model: PurchaseOrderLineModel) -> PurchaseOrderLineInfo:
        return cls(
            line_no=model.line_no,
            product_id=model.product_id,
            product_name=model.product_name,
            quantity=model.quantity,
            unit_cost=model.unit_cost,
        )


@dataclass(frozen=True)
class PurchaseOrderInfo:
    id: UUID
    order_number: str
    supplier_name: str
    status: str
    order_date: date
    currency: str
    total_amount: Decimal
    lines: tuple[PurchaseOrderLineInfo, ...]
    received_at: datetime | None = None
    remarks: str | None = None
    supplier_id: UUID | None = None

    @classmethod
    def from_model(cls, model: PurchaseOrderModel) -> PurchaseOrderInfo:
        return cls(
            id=model.id,
            order_number=model.order_number,
            supplier_name=model.supplier_name,
            status=model.status,
            order_date=model.order_date,
            currency=model.currency,
            total_amount=model.total_amount,
            lines=tuple(PurchaseOrderLineInfo.from_model(l) for l in model.lines),
            received_at=_as_utc(model.received_at),
            remarks=model.remarks,
            supplier_id=model.supplier_id,
        )


@dataclass(frozen=True)
class SalesOrderLineInfo:
    line_no: int
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    cost_at_sale: Decimal | None = None

    @property
    def amount(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def cost_of_goods_sold(self) -> Decimal | None:
        if self.cost_at_sale is None:
            return None
        return self.cost_at_sale * self.quantity

    @classmethod
    def from_model(cls, model: SalesOrderLineModel) -> SalesOrderLineInfo:
        return cls(
            line_no=model.line_no,
            product_id=model.product_id,
            product_name=model.product_name,
            quantity=model.quantity,
            unit_price=model.unit_price,
            cost_at_sale=model.cost_at_sale,
        )


@dataclass(frozen=True)
class SalesOrderInfo:
    id: UUID
    order_number: str
    customer_name: str
    status: str
    order_date: date
    currency: str
    price_tier: str
    total_amount: Decimal
    lines: tuple[SalesOrderLineInfo, ...]
    approved_at: datetime | None = None
    shipped_at: datetime | None = None
    remarks: str | None = None
    customer_id: UUID | None = None

    @classmethod
    def from_model(cls, model: SalesOrderModel) -> SalesOrderInfo:
        return cls(
            id=model.id,
            order_number=model.order_number,
            customer_name=model.customer_name,
            status=model.status,
            order_date=model.order_date,
            currency=model.currency,
            price_tier=model.price_tier,
            total_amount=model.total_amount,
            lines=tuple(SalesOrderLineInfo.from_model(l) for l in model.lines),
            approved_at=_as_utc(model.approved_at),
            shipped_at=_as_utc(model.shipped_at),
            remarks=model.remarks,
            customer_id=model.customer_id,
        )


# =============================================================================
# Ledger entries
# =============================================================================


@dataclass(frozen=True)
class InventoryLogEntry:
    """One immutable stock-ledger row."""

    id: UUID
    product_id: UUID
    product_name: str
    movement_type: MovementType
    change: int
    new_stock: int
    related_doc: str
    line_no: int
    timestamp: datetime
    actor_id: UUID

    @classmethod
    def from_model(cls, model: InventoryLogModel) -> InventoryLogEntry:
        return cls(
            id=model.id,
            product_id=model.product_id,
            product_name=model.product_name,
            movement_type=MovementType(model.movement_type),
            change=model.change,
            new_stock=model.new_stock,
            related_doc=model.related_doc,
            line_no=model.line_no,
            timestamp=_as_utc(model.timestamp),
            actor_id=model.actor_id,
        )


@dataclass(frozen=True)
class CostLogEntry:
    """One immutable cost-ledger row (receipts that moved the average)."""

    id: UUID
    product_id: UUID
    product_name: str
    movement_type: MovementType
    old_avg_cost: Decimal
    new_avg_cost: Decimal
    related_doc: str
    line_no: int
    timestamp: datetime
    actor_id: UUID

    @property
    def delta(self) -> Decimal:
        return self.new_avg_cost - self.old_avg_cost

    @classmethod
    def from_model(cls, model: CostLogModel) -> CostLogEntry:
        return cls(
            id=model.id,
            product_id=model.product_id,
            product_name=model.product_name,
            movement_type=MovementType(model.movement_type),
            old_avg_cost=model.old_avg_cost,
            new_avg_cost=model.new_avg_cost,
            related_doc=model.related_doc,
            line_no=model.line_no,
            timestamp=_as_utc(model.timestamp),
            actor_id=model.actor_id,
        )


# =============================================================================
# Movement results
# =============================================================================


@dataclass(frozen=True)
class MovementLine:
    """Effect of one order line on its product."""

    line_no: int
    product_id: UUID
    product_name: str
    quantity: int
    stock_before: int
    stock_after: int
    average_cost_before: Decimal
    average_cost_after: Decimal
    cost_at_sale: Decimal | None = None

    @property
    def cost_changed(self) -> bool:
        return self.average_cost_before != self.average_cost_after


@dataclass(frozen=True)
class MovementResult:
    """Outcome of a committed receipt or shipment."""

    order_id: UUID
    order_number: str
    movement_type: MovementType
    status: str
    timestamp: datetime
    lines: tuple[MovementLine, ...]
    inventory_log_count: int
    cost_log_count: int
    attempts: int = 1

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)


# =============================================================================
# Read models
# =============================================================================


@dataclass(frozen=True)
class StockReconciliation:
    """Comparison of a product's stock against a replay of its ledger."""

    product_id: UUID
    recorded_stock: int
    ledger_stock: int
    entry_count: int

    @property
    def discrepancy(self) -> int:
        return self.recorded_stock - self.ledger_stock

    @property
    def is_consistent(self) -> bool:
        return self.discrepancy == 0


@dataclass(frozen=True)
class SalesPerformance:
    """Revenue and margin over completed sales orders in a date range."""

    start_date: date
    end_date: date
    order_count: int
    revenue: Decimal
    cost_of_goods_sold: Decimal
    gross_profit: Decimal
    margin_percent: Decimal
    by_product: tuple[ProductSalesSummary, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ProductSalesSummary:
    product_id: UUID
    product_name: str
    quantity: int
    revenue: Decimal
    cost_of_goods_sold: Decimal

    @property
    def gross_profit(self) -> Decimal:
        return self.revenue - self.cost_of_goods_sold


@dataclass(frozen=True)
class CustomerStatement:
    """Completed sales orders of one customer in a date range, oldest first."""

    customer_name: str
    start_date: date
    end_date: date
    orders: tuple[SalesOrderInfo, ...]
    total_amount: Decimal
    customer_id: UUID | None = None

    @property
    def order_count(self) -> int:
        return len(self.orders)
